from django.apps import AppConfig


class IamConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "em_core.iam"
    label = "iam"
    verbose_name = "Identity and access"

    def ready(self) -> None:
        # registers the bearer scheme with drf-spectacular
        from em_core.iam import openapi  # noqa: F401
