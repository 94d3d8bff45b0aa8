"""
Integration tests for categories and products.
"""


class TestCategories:

    def test_cashier_can_list_but_not_create(self, client, cashier_headers):
        listing = client.get('/categories', headers=cashier_headers)
        assert listing.status_code == 200
        assert listing.json()['total'] == 3
        assert all(c['allowed_actions'] == ['view'] for c in listing.json()['items'])

        response = client.post('/categories', headers=cashier_headers, json={'name': 'Snacks'})
        assert response.status_code == 403

    def test_stock_manager_creates_and_edits_own_category(self, client, stock_headers):
        created = client.post('/categories', headers=stock_headers, json={'name': 'Monitors'})
        assert created.status_code == 201
        category = created.json()
        assert category['owner_id'] == 2
        assert 'edit' in category['allowed_actions']

        edited = client.patch(f"/categories/{category['id']}", headers=stock_headers,
                              json={'description': 'Screens'})
        assert edited.status_code == 200
        assert edited.json()['description'] == 'Screens'

        # Category 1 belongs to the admin
        assert client.patch('/categories/1', headers=stock_headers, json={'name': 'X'}).status_code == 403

    def test_admin_delete_is_direct(self, client, admin_headers):
        response = client.delete('/categories/3', headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == {
            'mode': 'direct', 'target_type': 'category', 'target_id': 3,
            'status': 'deleted', 'validation': None,
        }
        again = client.delete('/categories/3', headers=admin_headers)
        assert again.status_code == 409
        assert again.json()['error'] == 'invalid_state'

    def test_stock_manager_delete_becomes_request(self, client, stock_headers):
        response = client.delete('/categories/2', headers=stock_headers)
        assert response.status_code == 200
        body = response.json()
        assert body['mode'] == 'request'
        assert body['status'] == 'pending_deletion'
        assert body['validation']['status'] == 'pending'
        assert body['validation']['requester_email'] == 'stock@company.com'

        second = client.post('/categories/2/request-deletion', headers=stock_headers)
        assert second.status_code == 409

    def test_validation_errors(self, client, admin_headers):
        assert client.post('/categories', headers=admin_headers, json={'name': ''}).status_code == 422
        assert client.get('/categories/99', headers=admin_headers).status_code == 404


class TestProducts:

    def test_list_exposes_low_stock(self, client, cashier_headers):
        response = client.get('/products', headers=cashier_headers)
        assert response.status_code == 200
        items = {p['name']: p for p in response.json()['items']}
        assert items['Dell XPS 13']['low_stock'] is False
        assert items['Logitech MX Mouse']['low_stock'] is True

        low = client.get('/products', headers=cashier_headers, params={'low_stock': True})
        assert [p['name'] for p in low.json()['items']] == ['Logitech MX Mouse']

    def test_search_and_category_filter(self, client, stock_headers):
        response = client.get('/products', headers=stock_headers, params={'q': 'dell'})
        assert [p['id'] for p in response.json()['items']] == [1]
        response = client.get('/products', headers=stock_headers, params={'category_id': 2})
        assert [p['id'] for p in response.json()['items']] == [2]

    def test_create_product(self, client, stock_headers):
        response = client.post('/products', headers=stock_headers, json={
            'name': 'HP LaserJet', 'sell_price': 300, 'buy_price': 200,
            'stock_quantity': 2, 'min_stock': 3, 'category_id': 3,
        })
        assert response.status_code == 201
        body = response.json()
        assert body['owner_id'] == 2
        assert body['low_stock'] is True
        assert body['status'] == 'active'

    def test_negative_price_rejected(self, client, admin_headers):
        response = client.post('/products', headers=admin_headers, json={'name': 'Bad', 'sell_price': -5})
        assert response.status_code == 422

    def test_stock_is_not_editable(self, client, stock_headers):
        response = client.patch('/products/1', headers=stock_headers, json={'sell_price': 1100})
        assert response.status_code == 200
        assert response.json()['sell_price'] == 1100
        assert response.json()['stock_quantity'] == 15

    def test_restoration_request(self, client, admin_headers, stock_headers):
        assert client.delete('/products/2', headers=admin_headers).json()['status'] == 'deleted'

        response = client.post('/products/2/request-restoration', headers=stock_headers)
        assert response.status_code == 200
        assert response.json()['status'] == 'deleted'
        assert response.json()['validation']['action'] == 'restoration'

    def test_cashier_cannot_request_product_deletion(self, client, cashier_headers):
        response = client.post('/products/1/request-deletion', headers=cashier_headers)
        assert response.status_code == 403
