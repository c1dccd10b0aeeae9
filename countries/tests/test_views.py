import os
from datetime import timedelta
from unittest import mock

import requests
from django.conf import settings
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from countries.exceptions import PersistenceFailure
from countries.models import Country, SystemStatus
from .fakes import SAMPLE_COUNTRIES, SAMPLE_RATES, FakeResp, feeds, feeds_with_rate_error


class CountriesAPITestCase(TestCase):
    """Tests for the countries API endpoints.

    Covered endpoints:
    - POST /countries/refresh
    - GET  /countries
    - GET  /countries/<name>
    - DELETE /countries/<name>
    - GET /status
    - GET /countries/image
    - GET /
    """

    def setUp(self):
        self.client = APIClient()
        self.earlier = timezone.now() - timedelta(days=2)
        Country.objects.create(
            name="Testland",
            capital="Testville",
            region="Test Region",
            population=1000,
            currency_code="TST",
            exchange_rate=2.0,
            estimated_gdp=500.0,
            flag_url="http://example.com/flag.png",
            last_refreshed_at=self.earlier,
        )
        Country.objects.create(
            name="Samplestan",
            capital="Sample City",
            region="Sample Region",
            population=2000,
            currency_code="SMP",
            exchange_rate=4.0,
            estimated_gdp=1000.0,
            flag_url="http://example.com/flag2.png",
            last_refreshed_at=self.earlier,
        )
        SystemStatus.objects.set_status(2, self.earlier)

    def test_health(self):
        resp = self.client.get('/')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()['status'], 'running')

    def test_list_countries_basic(self):
        resp = self.client.get('/countries')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        data = resp.json()
        self.assertEqual([c['name'] for c in data], ['Samplestan', 'Testland'])
        self.assertIsInstance(data[0]['estimated_gdp'], float)

    def test_list_countries_filters_and_sort(self):
        resp = self.client.get('/countries', {'region': 'sample region'})
        self.assertEqual([c['name'] for c in resp.json()], ['Samplestan'])

        resp = self.client.get('/countries', {'currency': 'tst'})
        self.assertEqual([c['name'] for c in resp.json()], ['Testland'])

        resp = self.client.get('/countries', {'sort': 'gdp_desc'})
        self.assertEqual([c['name'] for c in resp.json()], ['Samplestan', 'Testland'])

        resp = self.client.get('/countries', {'sort': 'gdp_asc'})
        self.assertEqual([c['name'] for c in resp.json()], ['Testland', 'Samplestan'])

    def test_get_country_success_and_not_found(self):
        resp = self.client.get('/countries/testland')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()['name'], 'Testland')

        resp = self.client.get('/countries/NoSuchCountry')
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.json(), {'error': 'Country not found'})

    def test_delete_country_success_and_not_found(self):
        resp = self.client.delete('/countries/Samplestan')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertIn('message', resp.json())

        resp = self.client.get('/status')
        self.assertEqual(resp.json()['total_countries'], 1)

        resp = self.client.delete('/countries/Samplestan')
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertIn('error', resp.json())
        self.assertEqual(SystemStatus.objects.load().total_countries, 1)

    def test_delete_does_not_touch_refresh_time(self):
        self.client.delete('/countries/Testland')
        self.assertEqual(SystemStatus.objects.load().last_refreshed_at, self.earlier)

    def test_status_view(self):
        resp = self.client.get('/status')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        data = resp.json()
        self.assertEqual(data['total_countries'], 2)
        self.assertIsNotNone(data['last_refreshed_at'])

    def test_get_summary_image_not_found_and_found(self):
        image_path = settings.SUMMARY_IMAGE_PATH
        if os.path.exists(image_path):
            os.remove(image_path)

        resp = self.client.get('/countries/image')
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.json(), {'error': 'Summary image not found'})

        os.makedirs(os.path.dirname(image_path), exist_ok=True)
        with open(image_path, 'wb') as f:
            f.write(b'PNGDATA')

        resp = self.client.get('/countries/image')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp['Content-Type'], 'image/png')
        self.assertEqual(b''.join(resp.streaming_content), b'PNGDATA')
        resp.close()

    @mock.patch('countries.refresh.schedule_summary_image')
    @mock.patch('countries.services.requests.get')
    def test_refresh_success(self, mock_get, mock_schedule):
        mock_get.side_effect = feeds(SAMPLE_COUNTRIES, SAMPLE_RATES)

        with self.captureOnCommitCallbacks(execute=True):
            resp = self.client.post('/countries/refresh')

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        data = resp.json()
        self.assertEqual(data['total_countries'], 6)
        self.assertIn('message', data)
        self.assertIn('last_refreshed_at', data)
        self.assertEqual(SystemStatus.objects.load().total_countries, Country.objects.count())
        mock_schedule.assert_called_once()

    @mock.patch('countries.refresh.summary_snapshot', side_effect=RuntimeError('renderer broke'))
    @mock.patch('countries.services.requests.get')
    def test_refresh_succeeds_when_image_fails(self, mock_get, mock_snapshot):
        mock_get.side_effect = feeds(SAMPLE_COUNTRIES, SAMPLE_RATES)
        with self.assertLogs('countries.refresh', level='ERROR'):
            with self.captureOnCommitCallbacks(execute=True):
                resp = self.client.post('/countries/refresh')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        mock_snapshot.assert_called_once()

    @mock.patch('countries.services.requests.get')
    def test_refresh_rate_timeout_is_503(self, mock_get):
        mock_get.side_effect = feeds_with_rate_error(SAMPLE_COUNTRIES, requests.Timeout('timed out'))

        resp = self.client.post('/countries/refresh')

        self.assertEqual(resp.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        data = resp.json()
        self.assertEqual(data['error'], 'External data source unavailable')
        self.assertIn('Exchange rates API', data['details'])
        self.assertIn('timeout', data['details'])
        self.assertEqual(Country.objects.count(), 2)
        self.assertEqual(SystemStatus.objects.load().last_refreshed_at, self.earlier)

    @mock.patch('countries.services.requests.get')
    def test_refresh_country_feed_network_error_is_503(self, mock_get):
        mock_get.side_effect = requests.ConnectionError('network error')
        resp = self.client.post('/countries/refresh')
        self.assertEqual(resp.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertIn('Countries API', resp.json()['details'])

    @mock.patch('countries.services.requests.get')
    def test_refresh_malformed_payload_is_500(self, mock_get):
        mock_get.return_value = FakeResp({'unexpected': 'shape'})
        resp = self.client.post('/countries/refresh')
        self.assertEqual(resp.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(resp.json(), {'error': 'Internal server error'})

    @mock.patch('countries.services.requests.get')
    def test_refresh_persistence_failure_is_500(self, mock_get):
        mock_get.side_effect = feeds(SAMPLE_COUNTRIES, SAMPLE_RATES)
        with mock.patch.object(Country.objects, 'upsert_all', side_effect=PersistenceFailure('commit failed')):
            resp = self.client.post('/countries/refresh')
        self.assertEqual(resp.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(resp.json(), {'error': 'Internal server error'})
        self.assertEqual(SystemStatus.objects.load().total_countries, 2)
