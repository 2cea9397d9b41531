# em_core/common/api/views.py
from __future__ import annotations

from rest_framework.views import APIView

from em_core.common.context import RequestContext


class ContextAPIView(APIView):
    """
    APIView that attaches a RequestContext once authentication and
    permission checks have passed. Handlers read `request.ctx`.
    """

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        request.ctx = RequestContext.from_request(request)
