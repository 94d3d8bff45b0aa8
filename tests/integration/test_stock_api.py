"""
Integration tests for the stock ledger endpoints.
"""

from stockpos.models import Product, StockMovement


class TestMovements:

    def test_inbound_movement_raises_stock(self, client, session, stock_headers):
        response = client.post('/stock/movements', headers=stock_headers, json={
            'product_id': 2, 'type': 'in', 'quantity': 20, 'comment': 'Delivery',
        })
        assert response.status_code == 201
        body = response.json()
        assert body['stock_quantity'] == 23
        assert body['low_stock'] is False
        assert body['product_name'] == 'Logitech MX Mouse'
        assert body['user_email'] == 'stock@company.com'
        assert session.get(Product, 2).stock_quantity == 23

    def test_loss_can_leave_product_low(self, client, stock_headers):
        response = client.post('/stock/movements', headers=stock_headers, json={
            'product_id': 1, 'type': 'loss', 'quantity': 10,
        })
        assert response.status_code == 201
        assert response.json()['stock_quantity'] == 5
        assert response.json()['low_stock'] is True

    def test_outbound_beyond_stock_is_refused(self, client, session, stock_headers):
        response = client.post('/stock/movements', headers=stock_headers, json={
            'product_id': 2, 'type': 'out', 'quantity': 4,
        })
        assert response.status_code == 409
        body = response.json()
        assert body['error'] == 'insufficient_stock'
        assert (body['requested'], body['available']) == (4, 3)
        assert session.get(Product, 2).stock_quantity == 3
        assert session.query(StockMovement).count() == 0

    def test_zero_quantity_and_unknown_type(self, client, stock_headers):
        bad_qty = {'product_id': 1, 'type': 'in', 'quantity': 0}
        bad_type = {'product_id': 1, 'type': 'gift', 'quantity': 1}
        assert client.post('/stock/movements', headers=stock_headers, json=bad_qty).status_code == 422
        assert client.post('/stock/movements', headers=stock_headers, json=bad_type).status_code == 422

    def test_unknown_product(self, client, stock_headers):
        response = client.post('/stock/movements', headers=stock_headers, json={
            'product_id': 99, 'type': 'in', 'quantity': 1,
        })
        assert response.status_code == 404

    def test_movements_on_deleted_product_are_refused(self, client, admin_headers, stock_headers):
        client.delete('/products/2', headers=admin_headers)
        response = client.post('/stock/movements', headers=stock_headers, json={
            'product_id': 2, 'type': 'in', 'quantity': 1,
        })
        assert response.status_code == 409
        assert response.json()['error'] == 'invalid_state'

    def test_cashier_has_no_ledger_access(self, client, cashier_headers):
        assert client.get('/stock/movements', headers=cashier_headers).status_code == 403
        response = client.post('/stock/movements', headers=cashier_headers, json={
            'product_id': 1, 'type': 'in', 'quantity': 1,
        })
        assert response.status_code == 403


class TestMovementHistory:

    def test_list_and_filter(self, client, stock_headers, cashier_headers):
        client.post('/stock/movements', headers=stock_headers, json={'product_id': 1, 'type': 'in', 'quantity': 5})
        client.post('/stock/movements', headers=stock_headers, json={'product_id': 2, 'type': 'return', 'quantity': 1})
        client.post('/sales', headers=cashier_headers, json={'items': [{'product_id': 1, 'quantity': 1}]})

        everything = client.get('/stock/movements', headers=stock_headers).json()
        assert everything['total'] == 3

        outbound = client.get('/stock/movements', headers=stock_headers, params={'type': 'out'}).json()
        assert outbound['total'] == 1
        assert outbound['items'][0]['comment'].startswith('Sale #')

        mice = client.get('/stock/movements', headers=stock_headers, params={'q': 'logitech'}).json()
        assert [m['product_id'] for m in mice['items']] == [2]


class TestPreview:

    def test_preview_does_not_touch_stock(self, client, session, stock_headers):
        params = {'product_id': 1, 'type': 'out', 'quantity': 12}
        body = client.get('/stock/preview', headers=stock_headers, params=params).json()
        assert body == {
            'product_id': 1, 'current_stock': 15, 'new_stock': 3,
            'allowed': True, 'low_stock_after': True,
        }
        assert session.get(Product, 1).stock_quantity == 15

    def test_preview_of_refused_movement(self, client, stock_headers):
        params = {'product_id': 2, 'type': 'loss', 'quantity': 5}
        body = client.get('/stock/preview', headers=stock_headers, params=params).json()
        assert body['allowed'] is False
        assert body['new_stock'] is None
