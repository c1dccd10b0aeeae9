import logging
import os

from django.conf import settings
from django.http import FileResponse
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from .exceptions import CountryNotFound, ExternalSourceUnavailable, RefreshError
from .models import Country, SystemStatus
from .refresh import do_refresh
from .serializers import CountrySerializer, SystemStatusSerializer

logger = logging.getLogger(__name__)

API_VERSION = '1.0.0'


class RefreshCountriesView(APIView):
    """
    POST /countries/refresh
    Fetch countries + exchange rates, then upsert into DB and generate summary image.
    """

    def post(self, request):
        try:
            result = do_refresh()
        except ExternalSourceUnavailable as e:
            return Response(
                {"error": "External data source unavailable", "details": e.describe()},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )
        except RefreshError as e:
            logger.error("Refresh failed: %s", e)
            return Response({"error": "Internal server error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        except Exception:
            logger.exception("Unexpected refresh failure")
            return Response({"error": "Internal server error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response(result, status=status.HTTP_200_OK)


class CountriesListView(APIView):
    """
    GET /countries  -> supports ?region= & ?currency= & ?sort=gdp_desc|gdp_asc
    """

    def get(self, request):
        qs = Country.objects.query_all(
            region=request.query_params.get('region'),
            currency=request.query_params.get('currency'),
            sort=request.query_params.get('sort'),
        )
        serializer = CountrySerializer(qs, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)


class CountryDetailView(APIView):
    """
    GET /countries/<name>
    DELETE /countries/<name>
    """

    def get(self, request, name):
        try:
            obj = Country.objects.get_by_name(name)
        except CountryNotFound:
            return Response({"error": "Country not found"}, status=status.HTTP_404_NOT_FOUND)
        serializer = CountrySerializer(obj)
        return Response(serializer.data, status=status.HTTP_200_OK)

    def delete(self, request, name):
        if not Country.objects.delete_by_name(name):
            return Response({"error": "Country not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response({"message": "Country deleted successfully"}, status=status.HTTP_200_OK)


class StatusView(APIView):
    """
    GET /status
    """
    def get(self, request):
        serializer = SystemStatusSerializer(SystemStatus.objects.load())
        return Response(serializer.data, status=status.HTTP_200_OK)


class CountryImageView(APIView):
    """
    GET /countries/image
    """
    def get(self, request):
        path = settings.SUMMARY_IMAGE_PATH
        if not os.path.exists(path):
            return Response({"error": "Summary image not found"}, status=status.HTTP_404_NOT_FOUND)
        return FileResponse(open(path, 'rb'), content_type='image/png')


class HealthView(APIView):
    def get(self, request):
        return Response({
            "message": "Country Currency & Exchange API",
            "version": API_VERSION,
            "status": "running",
        })
