"""
Integration tests for dashboards, reports, exports, store settings and the audit log.
"""

from pathlib import Path

import pytest

from stockpos.config import settings


@pytest.fixture
def sales(client, cashier_headers):
    for items, method in (
        ([{'product_id': 1, 'quantity': 1}], 'cash'),
        ([{'product_id': 2, 'quantity': 2}], 'card'),
    ):
        response = client.post('/sales', headers=cashier_headers, json={
            'items': items, 'payment_method': method, 'tax_percent': 0,
        })
        assert response.status_code == 201
    return response.json()


class TestDashboard:

    def test_summary(self, client, sales, cashier_headers):
        body = client.get('/stats/summary', headers=cashier_headers).json()
        assert body['total_sales'] == 2
        assert body['total_revenue'] == 1360.0
        assert body['today_sales'] == 2
        assert body['total_products'] == 2
        # Only the mouse sits at or below its minimum
        assert body['low_stock_count'] == 1
        assert body['pending_validations'] == 0

    def test_charts_are_admin_only(self, client, sales, admin_headers, cashier_headers):
        assert client.get('/stats/daily-revenue', headers=cashier_headers).status_code == 403

        days = client.get('/stats/daily-revenue', headers=admin_headers).json()['data']
        assert len(days) == 7
        assert days[-1]['revenue'] == 1360.0

        top = client.get('/stats/top-products', headers=admin_headers).json()['data']
        assert [(t['product_id'], t['total_quantity_sold']) for t in top] == [(2, 2), (1, 1)]


class TestReports:

    def test_sales_report(self, client, sales, admin_headers):
        body = client.get('/reports/sales', headers=admin_headers).json()
        assert body['total_sales'] == 2
        assert body['total_revenue'] == 1360.0
        assert body['average_basket'] == 680.0
        assert body['by_payment_method'] == {'cash': 1200.0, 'card': 160.0}
        assert body['top_products'][0]['product_id'] == 2

    def test_sales_report_excludes_deleted_sales(self, client, sales, admin_headers):
        client.delete(f"/sales/{sales['id']}", headers=admin_headers)
        body = client.get('/reports/sales', headers=admin_headers).json()
        assert body['total_sales'] == 1
        assert body['total_revenue'] == 1200.0

    def test_stock_report(self, client, sales, stock_headers):
        body = client.get('/reports/stock', headers=stock_headers).json()
        assert body['total_products'] == 2
        assert body['total_units'] == 14 + 1
        assert [item['product_id'] for item in body['low_stock']] == [2]
        assert body['movements_by_type'] == {'out': 3}

    def test_users_report(self, client, sales, admin_headers):
        body = client.get('/reports/users', headers=admin_headers).json()
        assert body['total_users'] == 3
        assert body['by_role'] == {'admin': 1, 'stock_manager': 1, 'cashier': 1}
        cashier = [a for a in body['activity'] if a['email'] == 'cashier@company.com'][0]
        assert (cashier['sales'], cashier['revenue'], cashier['movements']) == (2, 1360.0, 2)

    def test_report_access(self, client, stock_headers, cashier_headers):
        assert client.get('/reports/sales', headers=stock_headers).status_code == 403
        assert client.get('/reports/users', headers=stock_headers).status_code == 403
        assert client.get('/reports/stock', headers=cashier_headers).status_code == 403

    def test_reversed_range(self, client, admin_headers):
        params = {'date_from': '2026-03-10', 'date_to': '2026-03-01'}
        response = client.get('/reports/sales', headers=admin_headers, params=params)
        assert response.status_code == 422


class TestExport:

    def test_csv_export(self, client, sales, admin_headers):
        response = client.get('/reports/sales/export', headers=admin_headers, params={'format': 'csv'})
        assert response.status_code == 200
        assert response.headers['content-type'].startswith('text/csv')
        lines = response.text.strip().splitlines()
        assert lines[0].startswith('id,date,cashier,payment_method')
        assert len(lines) == 3

    def test_pdf_export_of_own_sales(self, client, sales, cashier_headers):
        response = client.get('/reports/my-sales/export', headers=cashier_headers, params={'format': 'pdf'})
        assert response.status_code == 200
        assert response.headers['content-type'] == 'application/pdf'
        assert response.content.startswith(b'%PDF')

    def test_export_is_logged(self, client, stock_headers, admin_headers):
        client.get('/reports/stock/export', headers=stock_headers)
        logs = client.get('/logs', headers=admin_headers, params={'action': 'REPORT_EXPORT'}).json()
        assert logs['total'] == 1
        assert logs['items'][0]['meta']['type'] == 'stock'

    def test_export_files_are_removed_after_download(self, client, sales, admin_headers):
        export_dir = Path(settings.EXPORT_DIR)
        before = set(export_dir.glob('*')) if export_dir.exists() else set()
        for fmt in ('csv', 'pdf'):
            response = client.get('/reports/sales/export', headers=admin_headers, params={'format': fmt})
            assert response.status_code == 200
        assert set(export_dir.glob('*')) == before

    def test_unsupported_format(self, client, admin_headers):
        response = client.get('/reports/sales/export', headers=admin_headers, params={'format': 'xlsx'})
        assert response.status_code == 422

    def test_export_access(self, client, cashier_headers):
        assert client.get('/reports/sales/export', headers=cashier_headers).status_code == 403


class TestSettings:

    def test_everyone_reads_settings(self, client, cashier_headers):
        body = client.get('/settings', headers=cashier_headers).json()
        assert body['default_tax_rate'] == 20.0
        assert body['max_discount_percent'] == 10.0

    def test_admin_updates_settings(self, client, admin_headers):
        response = client.put('/settings', headers=admin_headers, json={'default_tax_rate': 5.5, 'currency': 'USD'})
        assert response.status_code == 200
        assert response.json()['default_tax_rate'] == 5.5
        assert client.get('/settings', headers=admin_headers).json()['currency'] == 'USD'

    def test_others_cannot_update(self, client, stock_headers):
        response = client.put('/settings', headers=stock_headers, json={'default_tax_rate': 0})
        assert response.status_code == 403

    def test_invalid_values(self, client, admin_headers):
        response = client.put('/settings', headers=admin_headers, json={'max_discount_percent': 150})
        assert response.status_code == 422


class TestLogs:

    def test_logs_are_admin_only(self, client, sales, admin_headers, cashier_headers):
        assert client.get('/logs', headers=cashier_headers).status_code == 403
        body = client.get('/logs', headers=admin_headers, params={'resource': 'sales'}).json()
        assert body['total'] == 2
        assert {item['action'] for item in body['items']} == {'SALE_CREATE'}
        assert body['items'][0]['user_email'] == 'cashier@company.com'
