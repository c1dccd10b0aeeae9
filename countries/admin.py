from django.contrib import admin
from .models import Country, SystemStatus

@admin.register(Country)
class CountryAdmin(admin.ModelAdmin):
    list_display = ('name','region','currency_code','population','estimated_gdp','last_refreshed_at')
    list_filter = ('region',)
    search_fields = ('name','currency_code')


@admin.register(SystemStatus)
class SystemStatusAdmin(admin.ModelAdmin):
    list_display = ('total_countries', 'last_refreshed_at')
    readonly_fields = ('total_countries', 'last_refreshed_at')

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
