"""
Views for authentication.

Token issuance is delegated to rest_framework_simplejwt (see urls.py); this
module only adds the current-user endpoint.
"""

from drf_spectacular.utils import extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.serializers import UserSerializer


class CurrentUserView(APIView):
    """Return the authenticated user's account."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="get_current_user",
        summary="Current user",
        tags=["Auth"],
        responses=UserSerializer,
    )
    def get(self, request):
        return Response(UserSerializer(request.user).data)
