import pytest

from studio_dashboard.exceptions import NotFoundError
from studio_dashboard.photo_sharing import ADMIN_VIEW, CLIENT_VIEW, resolve_photo_share


def test_share_token_opens_client_view(store):
    view = resolve_photo_share(contract_id='whatever', share_token='tok123')
    assert view.mode == CLIENT_VIEW
    assert view.share_token == 'tok123'
    assert not view.is_admin


def test_contract_id_opens_admin_view(store):
    store.set_document('contracts', 'c1', {'clientName': 'Beatriz'})
    view = resolve_photo_share(contract_id='c1')
    assert view.mode == ADMIN_VIEW
    assert view.is_admin
    assert view.client_name == 'Beatriz'
    assert view.contract['id'] == 'c1'


def test_admin_view_defaults_client_name(store):
    store.set_document('contracts', 'c2', {'clientName': ''})
    assert resolve_photo_share(contract_id='c2').client_name == 'Cliente'


def test_missing_contract(store):
    with pytest.raises(NotFoundError) as excinfo:
        resolve_photo_share(contract_id='ghost')
    assert excinfo.value.code == 'contract_not_found'


def test_no_parameters_is_invalid_url(store):
    with pytest.raises(NotFoundError) as excinfo:
        resolve_photo_share()
    assert excinfo.value.code == 'invalid_url'
    assert str(excinfo.value) == 'URL inválida'
