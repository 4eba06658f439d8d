"""
HTTP boundary tests: status codes and JSON error mapping.
"""
import uuid


def test_health(client, db_session):
    response = client.get('/v1/health')
    assert response.status_code == 200
    assert response.json['status'] == 'ok'
    assert response.json['database']['status'] == 'healthy'


def test_create_and_list_parties(client, db_session):
    response = client.post('/v1/parties', json={
        'name': 'Route Seller',
        'document': 'RS-1',
        'profile': 'seller',
    })
    assert response.status_code == 201
    party_id = response.json['id']
    assert response.json['profile'] == 'SELLER'

    response = client.get('/v1/parties?profile=SELLER')
    assert response.status_code == 200
    assert [p['id'] for p in response.json['items']] == [party_id]

    response = client.get(f'/v1/parties/{party_id}')
    assert response.status_code == 200
    assert response.json['name'] == 'Route Seller'


def test_party_errors(client, db_session):
    response = client.get('/v1/parties/not-an-id')
    assert response.status_code == 400
    assert response.json['code'] == 'INVALID_INPUT'

    response = client.get(f'/v1/parties/{uuid.uuid4()}')
    assert response.status_code == 404
    assert response.json['code'] == 'NOT_FOUND'

    response = client.get('/v1/parties?profile=ADMIN')
    assert response.status_code == 400


def test_product_lifecycle(client, db_session, seller):
    response = client.post('/v1/products', json={
        'name': 'Lamp',
        'sale_unit': 'unit',
        'unit_price': '45.90',
        'initial_quantity': 7,
    })
    assert response.status_code == 201
    product_id = response.json['id']
    assert response.json['message'] == 'Product created successfully with initial stock of 7 units'

    response = client.get(f'/v1/products/{product_id}')
    assert response.status_code == 200
    assert response.json['unit_price'] == '45.90'
    assert response.json['available_quantity'] == 7

    response = client.get('/v1/products')
    assert response.json['count'] == 1

    response = client.delete(f'/v1/products/{product_id}')
    assert response.status_code == 200

    response = client.delete(f'/v1/products/{product_id}')
    assert response.status_code == 404
    assert response.json['code'] == 'PRODUCT_NOT_FOUND'


def test_create_product_without_seller(client, db_session):
    response = client.post('/v1/products', json={
        'name': 'Lamp',
        'sale_unit': 'unit',
        'unit_price': '45.90',
        'initial_quantity': 20,
    })
    assert response.status_code == 400
    assert response.json['code'] == 'BUSINESS_RULE_VIOLATION'


def test_register_movement(client, db_session, product_id, seller):
    response = client.post('/v1/inventory/movements', json={
        'product_id': str(product_id),
        'party_id': str(seller.id),
        'kind': 'outbound',
        'quantity': 4,
    })
    assert response.status_code == 201
    assert response.json['message'] == "Outbound registered: -4 units of 'Widget'. Stock updated."

    response = client.get(f'/v1/inventory/availability/{product_id}')
    assert response.json['available_quantity'] == 6

    response = client.get(f'/v1/inventory/movements/{product_id}')
    assert response.json['count'] == 2


def test_register_movement_errors(client, db_session, product_id, seller):
    base = {'product_id': str(product_id), 'party_id': str(seller.id), 'kind': 'OUTBOUND'}

    response = client.post('/v1/inventory/movements', json={**base, 'quantity': 11})
    assert response.status_code == 400
    assert response.json['code'] == 'INSUFFICIENT_STOCK'

    response = client.post('/v1/inventory/movements', json={**base, 'quantity': '2.5'})
    assert response.status_code == 400
    assert response.json['code'] == 'INVALID_INPUT'

    response = client.post('/v1/inventory/movements', json=base)
    assert response.status_code == 400

    response = client.post('/v1/inventory/movements', json={**base, 'kind': 'GIFT', 'quantity': 1})
    assert response.status_code == 400
    assert 'Allowed values' in response.json['error']


def test_create_and_read_sale(client, db_session, customer, make_product):
    p1 = make_product(name='Keyboard', unit_price='100.00', initial_quantity=5)
    p2 = make_product(name='Mouse', unit_price='50.00', initial_quantity=5)

    response = client.post('/v1/sales', json={
        'customer_id': str(customer.id),
        'branch': 'Centro',
        'lines': [
            {'product_id': str(p1), 'quantity': 2},
            {'product_id': str(p2), 'quantity': 1},
        ],
    })
    assert response.status_code == 201
    assert response.json['total'] == '250.00'
    sale_id = response.json['id']

    response = client.get(f'/v1/sales/{sale_id}')
    assert response.status_code == 200
    assert [line['subtotal'] for line in response.json['lines']] == ['200.00', '50.00']
    assert response.json['lines'][0]['product_name'] == 'Keyboard'

    response = client.get(f'/v1/sales?customer_id={customer.id}')
    assert response.json['count'] == 1


def test_sale_errors(client, db_session, customer, product_id):
    response = client.post('/v1/sales', json={
        'customer_id': str(customer.id),
        'lines': [{'product_id': str(product_id), 'quantity': 50}],
    })
    assert response.status_code == 400
    assert response.json['code'] == 'BUSINESS_RULE_VIOLATION'
    assert response.json['details']['available_quantity'] == 10

    response = client.post('/v1/sales', json={'customer_id': str(customer.id), 'lines': 'x'})
    assert response.status_code == 400

    response = client.post('/v1/sales', json={'customer_id': str(customer.id), 'lines': []})
    assert response.status_code == 400
    assert response.json['error'] == 'A sale must have at least one line'

    response = client.get(f'/v1/sales/{uuid.uuid4()}')
    assert response.status_code == 404


def test_oversized_quantities_are_bad_requests(client, db_session, product_id, seller, customer):
    response = client.post('/v1/inventory/movements', json={
        'product_id': str(product_id),
        'party_id': str(seller.id),
        'kind': 'INBOUND',
        'quantity': 2**63,
    })
    assert response.status_code == 400
    assert response.json['code'] == 'INVALID_INPUT'

    response = client.post('/v1/products', json={
        'name': 'Huge',
        'sale_unit': 'unit',
        'unit_price': '1.00',
        'initial_quantity': 2**63,
    })
    assert response.status_code == 400
    assert response.json['code'] == 'INVALID_INPUT'

    response = client.post('/v1/sales', json={
        'customer_id': str(customer.id),
        'lines': [{'product_id': str(product_id), 'quantity': str(2**31)}],
    })
    assert response.status_code == 400
    assert response.json['code'] == 'INVALID_INPUT'
