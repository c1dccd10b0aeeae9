from rest_framework import serializers
from .models import Country, SystemStatus

class CountrySerializer(serializers.ModelSerializer):
    # numeric fields come out as numbers, not strings
    exchange_rate = serializers.FloatField(allow_null=True, read_only=True)
    estimated_gdp = serializers.FloatField(allow_null=True, read_only=True)

    class Meta:
        model = Country
        fields = [
            'id', 'name', 'capital', 'region', 'population', 'currency_code',
            'exchange_rate', 'estimated_gdp', 'flag_url', 'last_refreshed_at'
        ]
        read_only_fields = fields


class SystemStatusSerializer(serializers.ModelSerializer):
    class Meta:
        model = SystemStatus
        fields = ['total_countries', 'last_refreshed_at']
        read_only_fields = fields
