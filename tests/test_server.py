"""Tests for the HTTP endpoints."""
import asyncio

import pytest
from fastapi.testclient import TestClient

from petcore.main import SessionOrchestrator
from petcore.memory import SlotMemory
from petcore.server import create_app

from conftest import FakeClock


@pytest.fixture
def orchestrator(tmp_path):
    memory = SlotMemory(str(tmp_path / 'slots.db'))
    asyncio.run(memory.initialize())
    return SessionOrchestrator(memory, interval=3600, clock=FakeClock())


@pytest.fixture
def client(orchestrator, monkeypatch):
    monkeypatch.delenv('PETCORE_API_KEY', raising=False)
    with TestClient(create_app(orchestrator)) as client:
        yield client
        client.portal.call(orchestrator.stop)


@pytest.fixture
def with_pet(client):
    client.post('/slots/1/activate')
    response = client.post('/pet', json={'name': 'Rex', 'pet_type': 'dog'})
    assert response.status_code == 200
    return client


class TestSlots:
    def test_list_empty(self, client):
        response = client.get('/slots')
        assert response.status_code == 200
        body = response.json()
        assert body['active'] is None
        assert [s['exists'] for s in body['slots']] == [False, False, False]

    def test_activate(self, client):
        response = client.post('/slots/2/activate')
        assert response.status_code == 200
        assert response.json() == {'pet': None}
        assert client.get('/slots').json()['active'] == 2

    def test_activate_invalid_slot(self, client):
        assert client.post('/slots/9/activate').status_code == 400

    def test_no_slot_selected(self, client):
        assert client.get('/pet').status_code == 404

    def test_delete(self, with_pet):
        assert with_pet.delete('/slots/1').status_code == 200
        assert with_pet.get('/pet').status_code == 404
        assert with_pet.get('/slots').json()['slots'][0]['exists'] is False


class TestPet:
    def test_create(self, with_pet):
        pet = with_pet.get('/pet').json()['pet']
        assert pet['name'] == 'Rex'
        assert pet['petType'] == 'dog'
        assert pet['coins'] == 1000
        assert pet['mood'] == 'energetic'
        assert pet['careScore'] == 100

    def test_bad_name(self, client):
        client.post('/slots/1/activate')
        response = client.post('/pet', json={'name': 'admin'})
        assert response.status_code == 400
        assert response.json()['detail'] == 'Pet name contains inappropriate content.'


    def test_status(self, with_pet):
        status = with_pet.get('/pet').json()['status']
        assert status['allowance'] == 'Available now'
        assert status['allowanceAvailable'] is True
        assert status['checkInAvailable'] is True
        assert status['readyQuests'] == []

        with_pet.post('/rewards/allowance')
        with_pet.post('/actions/visit_vet', json={'params': {'cost': 50}})
        status = with_pet.get('/pet').json()['status']
        assert status['allowance'] == 'Next allowance in 7d 0h'
        assert status['allowanceAvailable'] is False
        assert status['readyQuests'] == ['health_check']


class TestShop:
    def test_catalog(self, client):
        items = client.get('/shop').json()
        assert len(items) == 12

    def test_category_filter(self, client):
        items = client.get('/shop', params={'category': 'food'}).json()
        assert [item['id'] for item in items] == [1, 2]
        assert client.get('/shop', params={'category': 'cars'}).json() == []


class TestActions:
    def test_buy_then_feed(self, with_pet):
        bought = with_pet.post('/shop/1')
        assert bought.status_code == 200
        assert bought.json()['pet']['inventory'] == {'1': 1}

        fed = with_pet.post('/actions/feed', json={})
        assert fed.status_code == 200
        assert fed.json()['success'] is True
        assert fed.json()['pet']['inventory'] == {'1': 0}

    def test_unknown_item(self, with_pet):
        assert with_pet.post('/shop/999').status_code == 404

    def test_unknown_action(self, with_pet):
        assert with_pet.post('/actions/dance', json={}).status_code == 404

    def test_vet_visit_with_params(self, with_pet):
        response = with_pet.post('/actions/visit_vet', json={'params': {'cost': 50}})
        body = response.json()
        assert body['success'] is True
        assert body['pet']['coins'] == 950

        claimed = with_pet.post('/quests/health_check/claim')
        assert claimed.status_code == 200
        assert claimed.json()['pet']['coins'] == 995

    def test_unfinished_quest(self, with_pet):
        assert with_pet.post('/quests/feed_pet/claim').status_code == 409

    def test_rejected_action_is_reported(self, with_pet):
        response = with_pet.post('/actions/play', json={'params': {'cost': 5000}})
        assert response.status_code == 200
        assert response.json()['success'] is False
        assert 'Not enough coins' in response.json()['message']


class TestRewards:
    def test_allowance_once(self, with_pet):
        first = with_pet.post('/rewards/allowance')
        assert first.status_code == 200
        assert first.json()['pet']['coins'] == 1070
        assert with_pet.post('/rewards/allowance').status_code == 409

    def test_task(self, with_pet):
        response = with_pet.post('/tasks/training')
        assert response.json()['success'] is True
        assert response.json()['pet']['coins'] == 1018


class TestApiKey:
    def test_required_when_configured(self, client, monkeypatch):
        monkeypatch.setenv('PETCORE_API_KEY', 'secret')
        assert client.get('/slots').status_code == 401
        assert client.get('/slots', headers={'X-API-KEY': 'wrong'}).status_code == 401
        assert client.get('/slots', headers={'X-API-KEY': 'secret'}).status_code == 200


class TestMiniGame:
    def test_reward_is_paid(self, with_pet):
        response = with_pet.post('/rewards/minigame', json={'coins': 9, 'happiness': 4})
        assert response.status_code == 200
        body = response.json()
        assert body['pet']['coins'] == 1009
        assert body['income']['source'] == 'minigame'

    def test_negative_reward_is_rejected(self, with_pet):
        assert with_pet.post('/rewards/minigame', json={'coins': -5}).status_code == 422


class TestDemo:
    def test_start_and_exit(self, client):
        started = client.post('/demo/1/start')
        assert started.status_code == 200
        assert started.json()['meta']['demo'] is True
        assert started.json()['meta']['demoSeedVersion'] == 1
        assert client.get('/pet').json()['status']['demo'] is True

        assert client.delete('/demo/1').status_code == 200
        assert client.get('/slots').json()['active'] is None

    def test_reset_replaces_the_pet(self, client):
        first = client.post('/demo/1/start').json()['pet']['id']
        second = client.post('/demo/1/reset').json()['pet']['id']
        assert first != second

    def test_exit_refuses_a_regular_pet(self, with_pet):
        response = with_pet.delete('/demo/1')
        assert response.status_code == 400
        assert response.json()['detail'] == 'Slot 1 is not in demo mode.'
