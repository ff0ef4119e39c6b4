# app/api/pets/test_pet_routes.py
"""
Usage: python -m pytest app/api/pets/test_pet_routes.py -v
"""
import io

from app.models.pet import PetSpecies, PetStatus
from conftest import auth_header

NEW_PET = {
    'name': 'Buddy',
    'species': 'Dog',
    'breed': 'Beagle',
    'age': 2,
    'gender': 'Male',
    'size': 'Medium',
    'description': 'Loves long walks',
    'vaccinated': True,
}


def test_public_listing_shows_available_pets(client, make_pet):
    make_pet(name='Open')
    make_pet(name='Taken', status=PetStatus.ADOPTED)

    res = client.get('/api/pets')

    assert res.status_code == 200
    body = res.get_json()
    assert [p['name'] for p in body['data']] == ['Open']
    assert body['pagination'] == {'page': 1, 'limit': 12, 'total': 1, 'pages': 1, 'count': 1}


def test_admin_view_listing(client, make_pet, admin):
    make_pet(name='Open')
    make_pet(name='Taken', status=PetStatus.ADOPTED)

    res = client.get('/api/pets?admin_view=true', headers=auth_header(admin))

    assert res.get_json()['pagination']['total'] == 2


def test_listing_rejects_invalid_filters(client):
    res = client.get('/api/pets?species=Dragon')

    assert res.status_code == 422
    assert res.get_json()['errors'][0]['field'] == 'species'


def test_admin_creates_and_fetches_pet(client, admin):
    res = client.post('/api/pets', headers=auth_header(admin), json=NEW_PET)

    assert res.status_code == 201
    created = res.get_json()['data']
    assert created['status'] == 'Available'
    assert created['added_by'] == admin.user_id

    fetched = client.get(f"/api/pets/{created['pet_id']}").get_json()
    assert fetched['data']['name'] == 'Buddy'
    assert fetched['data']['vaccinated'] is True


def test_user_cannot_create_pet(client, alice):
    res = client.post('/api/pets', headers=auth_header(alice), json=NEW_PET)

    assert res.status_code == 403
    assert res.get_json()['message'] == "User role 'user' is not authorized to perform this action"


def test_create_pet_validation(client, admin):
    res = client.post('/api/pets', headers=auth_header(admin), json={**NEW_PET, 'age': -1, 'gender': 'Unknown'})

    assert res.status_code == 422
    fields = {e['field'] for e in res.get_json()['errors']}
    assert fields == {'age', 'gender'}


def test_update_pet(client, make_pet, admin):
    pet = make_pet()

    res = client.put(f"/api/pets/{pet.pet_id}", headers=auth_header(admin), json={'age': 4, 'location': 'Shelter B'})

    assert res.status_code == 200
    assert res.get_json()['data']['age'] == 4
    assert res.get_json()['data']['location'] == 'Shelter B'


def test_patch_status_override(client, make_pet, admin):
    pet = make_pet()

    res = client.patch(f"/api/pets/{pet.pet_id}/status", headers=auth_header(admin), json={'status': 'Adopted'})

    assert res.status_code == 200
    assert res.get_json()['data']['status'] == 'Adopted'


def test_patch_status_with_invalid_value(client, make_pet, admin):
    res = client.patch(f"/api/pets/{make_pet().pet_id}/status", headers=auth_header(admin), json={'status': 'Gone'})

    assert res.status_code == 400
    assert res.get_json()['message'] == 'Invalid status. Must be one of: Available, Pending, Adopted'


def test_delete_pet(client, make_pet, admin):
    pet = make_pet()

    assert client.delete(f"/api/pets/{pet.pet_id}", headers=auth_header(admin)).status_code == 200
    assert client.get(f"/api/pets/{pet.pet_id}").status_code == 404


def test_pet_id_that_is_not_a_document_id_is_not_found(client):
    res = client.get('/api/pets/__meta__')

    assert res.status_code == 404
    assert res.get_json()['message'] == 'Pet not found'


def test_upload_photos_appends_public_urls(client, fake_bucket, make_pet, admin):
    pet = make_pet(photos=['https://example.com/existing.jpg'])
    data = {
        'photos': [
            (io.BytesIO(b'fake-jpeg'), 'one.jpg', 'image/jpeg'),
            (io.BytesIO(b'fake-png'), 'two.png', 'image/png'),
        ]
    }

    res = client.post(f"/api/pets/{pet.pet_id}/photos", headers=auth_header(admin),
                      data=data, content_type='multipart/form-data')

    assert res.status_code == 200
    body = res.get_json()
    assert body['message'] == 'Successfully uploaded 2 image(s)'
    photos = body['data']['photos']
    assert photos[0] == 'https://example.com/existing.jpg'
    assert len(photos) == 3
    assert all(url.startswith(f"https://storage.googleapis.com/test-bucket/pet_photos/{pet.pet_id}/") for url in photos[1:])
    assert len(fake_bucket.files) == 2
    assert all(blob.public for blob in fake_bucket.blobs.values())


def test_upload_message_counts_only_real_files(client, fake_bucket, make_pet, admin):
    pet = make_pet()
    data = {
        'photos': [
            (io.BytesIO(b'fake-jpeg'), 'one.jpg', 'image/jpeg'),
            (io.BytesIO(b''), '', 'application/octet-stream'),
        ]
    }

    res = client.post(f"/api/pets/{pet.pet_id}/photos", headers=auth_header(admin),
                      data=data, content_type='multipart/form-data')

    assert res.status_code == 200
    assert res.get_json()['message'] == 'Successfully uploaded 1 image(s)'
    assert len(res.get_json()['data']['photos']) == 1


def test_upload_rejects_non_images(client, fake_bucket, make_pet, admin):
    pet = make_pet()
    data = {'photos': [(io.BytesIO(b'%PDF'), 'doc.pdf', 'application/pdf')]}

    res = client.post(f"/api/pets/{pet.pet_id}/photos", headers=auth_header(admin),
                      data=data, content_type='multipart/form-data')

    assert res.status_code == 400
    assert res.get_json()['message'].startswith('Images only!')
    assert fake_bucket.files == {}


def test_upload_without_files(client, make_pet, admin):
    res = client.post(f"/api/pets/{make_pet().pet_id}/photos", headers=auth_header(admin),
                      data={}, content_type='multipart/form-data')

    assert res.status_code == 400
    assert res.get_json()['message'] == 'Please upload at least one photo'


def test_upload_rejects_oversized_file(app, client, make_pet, admin):
    app.services['pets'].photo_max_bytes = 10
    data = {'photos': [(io.BytesIO(b'x' * 11), 'big.jpg', 'image/jpeg')]}

    res = client.post(f"/api/pets/{make_pet().pet_id}/photos", headers=auth_header(admin),
                      data=data, content_type='multipart/form-data')

    assert res.status_code == 400
    assert 'exceeds' in res.get_json()['message']


def test_filter_options_and_stats(client, make_pet, admin, alice):
    make_pet(species=PetSpecies.RABBIT, breed='Lop')

    options = client.get('/api/pets/filter-options').get_json()['data']
    assert options == {'species': ['Rabbit'], 'breeds': ['Lop']}

    assert client.get('/api/pets/admin/stats', headers=auth_header(alice)).status_code == 403
    stats = client.get('/api/pets/admin/stats', headers=auth_header(admin)).get_json()['data']
    assert {'status': 'Available', 'count': 1} in stats['status_stats']
    assert stats['species_stats'][0] == {'species': 'Rabbit', 'count': 1}
