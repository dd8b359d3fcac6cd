"""HTTP tests for the REST API over in-memory services."""

import uuid


def register(client, user_type="customer", username="alice123", email="a@x.com", password="longenough"):
    response = client.post("/auth/register", json={
        'username': username,
        'email': email,
        'password': password,
        'user_type': user_type,
    })
    assert response.status_code == 201, response.text
    return response.json()['data']


def bearer(pair):
    return {'Authorization': f"Bearer {pair['access_token']}"}


def test_healthz(client):
    response = client.get("/healthz")

    assert response.status_code == 200
    assert response.json() == {'status': 'alive'}


def test_register_wraps_token_pair(client):
    response = client.post("/auth/register", json={
        'username': "alice123",
        'email': "a@x.com",
        'password': "longenough",
        'user_type': "customer",
    })

    assert response.status_code == 201
    body = response.json()
    assert body['success'] is True
    assert set(body['data']) == {'access_token', 'refresh_token'}


def test_duplicate_registration_conflicts(client):
    register(client)

    response = client.post("/auth/register", json={
        'username': "alice_two",
        'email': "a@x.com",
        'password': "longenough",
        'user_type': "customer",
    })

    assert response.status_code == 409
    assert response.json() == {'success': False, 'error': "email already exists"}


def test_invalid_request_body_is_a_bad_request(client):
    response = client.post("/auth/register", json={
        'username': "al",
        'email': "not-an-email",
        'password': "short",
        'user_type': "customer",
    })

    assert response.status_code == 400
    body = response.json()
    assert body['success'] is False
    assert body['error'].startswith("invalid request")


def test_unknown_user_type_is_a_bad_request(client):
    response = client.post("/auth/register", json={
        'username': "mallory",
        'email': "m@x.com",
        'password': "longenough",
        'user_type': "admin",
    })

    assert response.status_code == 400


def test_login_with_both_identifiers_is_a_bad_request(client):
    register(client)

    response = client.post("/auth/login", json={
        'username': "alice123",
        'email': "a@x.com",
        'password': "longenough",
        'user_type': "customer",
    })

    assert response.status_code == 400
    assert response.json()['success'] is False


def test_wrong_password_is_unauthorized(client):
    register(client)

    response = client.post("/auth/login", json={
        'username': "alice123",
        'password': "wrong-password",
        'user_type': "customer",
    })

    assert response.status_code == 401


def test_refresh_rotates_pair(client):
    pair = register(client)

    response = client.post("/auth/refresh", json={'refresh_token': pair['refresh_token']})

    assert response.status_code == 200
    assert response.json()['data']['refresh_token'] != pair['refresh_token']
    replay = client.post("/auth/refresh", json={'refresh_token': pair['refresh_token']})
    assert replay.status_code == 401


def test_missing_bearer_token_is_unauthorized(client):
    response = client.get("/categories")

    assert response.status_code == 401
    assert response.json()['success'] is False


def test_garbage_bearer_token_is_unauthorized(client):
    response = client.get("/categories", headers={'Authorization': "Bearer not.a.token"})

    assert response.status_code == 401


def test_customer_cannot_use_seller_routes(client):
    pair = register(client)

    response = client.post("/categories", json={'name': "Lamps"}, headers=bearer(pair))

    assert response.status_code == 403
    assert response.json()['success'] is False


def test_malformed_path_id_is_a_bad_request(client):
    pair = register(client)

    response = client.get("/categories/not-a-uuid", headers=bearer(pair))

    assert response.status_code == 400


def test_unknown_route_is_enveloped(client):
    response = client.get("/no/such/route")

    assert response.status_code == 404
    assert response.json()['success'] is False


def test_seller_catalog_flow(client):
    seller = bearer(register(client, "seller", "acme_store", "shop@acme.com", "sellerpass"))
    customer = bearer(register(client))

    category = client.post("/categories", json={'name': "Lamps"}, headers=seller)
    assert category.status_code == 201
    category_id = category.json()['data']['id']

    product = client.post(
        f"/categories/{category_id}/products",
        json={'title': "Desk lamp", 'description': "Brass", 'price': 19.99},
        headers=seller
    )
    assert product.status_code == 201
    product_id = product.json()['data']['id']

    listed = client.get(f"/categories/{category_id}/products", headers=customer)
    assert [p['id'] for p in listed.json()['data']] == [product_id]

    by_title = client.get("/products/title/Desk lamp", headers=customer)
    assert by_title.json()['data']['price'] == 19.99

    image = client.post(
        f"/products/{product_id}/images",
        json={'url': "https://cdn.test/lamp.jpg"},
        headers=seller
    )
    assert image.status_code == 201
    image_id = image.json()['data']['id']
    assert client.get(f"/images/{image_id}", headers=customer).status_code == 200

    deleted = client.delete(f"/products/{product_id}", headers=seller)
    assert deleted.status_code == 204
    assert deleted.content == b''


def test_duplicate_product_title_conflicts(client):
    seller = bearer(register(client, "seller", "acme_store", "shop@acme.com", "sellerpass"))
    category_id = client.post("/categories", json={'name': "Lamps"}, headers=seller).json()['data']['id']
    body = {'title': "Desk lamp", 'price': 10}

    client.post(f"/categories/{category_id}/products", json=body, headers=seller)
    response = client.post(f"/categories/{category_id}/products", json=body, headers=seller)

    assert response.status_code == 409


def test_missing_category_is_not_found(client):
    pair = register(client)

    response = client.get(f"/categories/{uuid.uuid4()}", headers=bearer(pair))

    assert response.status_code == 404
    assert response.json() == {'success': False, 'error': "category not found"}


def test_update_profile(client, identities):
    pair = register(client)

    response = client.put(
        "/auth/update-profile",
        json={'first_name': "Alice", 'phone': "+15551234567"},
        headers=bearer(pair)
    )

    assert response.status_code == 204
    assert {'first_name': "Alice", 'phone': "+15551234567"} in identities.profiles.values()


def test_update_profile_with_other_role_payload(client):
    pair = register(client)

    response = client.put(
        "/auth/update-profile",
        json={'company_name': "Acme"},
        headers=bearer(pair)
    )

    assert response.status_code == 400


def test_update_auth_ends_session(client):
    pair = register(client)

    response = client.put(
        "/auth/update-auth",
        json={'refresh_token': pair['refresh_token'], 'username': "alice_renamed"},
        headers=bearer(pair)
    )

    assert response.status_code == 204
    replay = client.post("/auth/refresh", json={'refresh_token': pair['refresh_token']})
    assert replay.status_code == 401


def test_delete_account(client):
    pair = register(client)

    response = client.delete("/auth/delete", headers=bearer(pair))

    assert response.status_code == 204
    login = client.post("/auth/login", json={
        'username': "alice123",
        'password': "longenough",
        'user_type': "customer",
    })
    assert login.status_code == 401


def test_blank_username_counts_as_omitted_on_login(client):
    register(client)

    response = client.post("/auth/login", json={
        'username': "",
        'email': "a@x.com",
        'password': "longenough",
        'user_type': "customer",
    })

    assert response.status_code == 200
    assert response.json()['success'] is True


def test_blank_identifiers_on_login_are_missing(client):
    response = client.post("/auth/login", json={
        'username': "",
        'email': "",
        'password': "longenough",
        'user_type': "customer",
    })

    assert response.status_code == 400
    assert response.json() == {'success': False, 'error': "username or email is required"}


def test_blank_fields_leave_credentials_untouched(client, identities):
    pair = register(client)

    response = client.put(
        "/auth/update-auth",
        json={
            'refresh_token': pair['refresh_token'],
            'email': "",
            'username': "alice_renamed",
            'old_password': "",
            'new_password': "",
        },
        headers=bearer(pair)
    )

    assert response.status_code == 204
    [identity] = identities.users.values()
    assert identity.username == "alice_renamed"
    assert identity.email == "a@x.com"


def test_blank_profile_fields_are_not_written(client, identities):
    pair = register(client)

    response = client.put(
        "/auth/update-profile",
        json={'first_name': "", 'phone': "", 'last_name': "Smith"},
        headers=bearer(pair)
    )

    assert response.status_code == 204
    assert {'last_name': "Smith"} in identities.profiles.values()
