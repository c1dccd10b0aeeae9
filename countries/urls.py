from django.urls import path
from .views import RefreshCountriesView, CountriesListView, CountryDetailView, StatusView, CountryImageView, HealthView

urlpatterns = [
    path('', HealthView.as_view(), name='health'),
    path('countries/refresh', RefreshCountriesView.as_view(), name='countries-refresh'),
    path('countries', CountriesListView.as_view(), name='countries-list'),
    # before the <name> route so 'image' is not taken as a country name
    path('countries/image', CountryImageView.as_view(), name='countries-image'),
    path('countries/<str:name>', CountryDetailView.as_view(), name='country-detail'),
    path('status', StatusView.as_view(), name='status'),
]
