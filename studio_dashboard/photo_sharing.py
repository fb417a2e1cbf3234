"""Entry point of the photo sharing page: decide between client and admin view."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from . import db
from .config import CONTRACTS
from .exceptions import NotFoundError

logger = logging.getLogger(__name__)

CLIENT_VIEW = 'client'
ADMIN_VIEW = 'admin'


@dataclass
class PhotoShareView:
    mode: str
    contract_id: Optional[str] = None
    share_token: Optional[str] = None
    client_name: str = 'Cliente'
    contract: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def is_admin(self) -> bool:
        return self.mode == ADMIN_VIEW


def resolve_photo_share(contract_id: Optional[str] = None, share_token: Optional[str] = None) -> PhotoShareView:
    """Resolve page parameters into a view.

    A share token always means the client gallery; otherwise the contract id
    must point to an existing contract for the admin library.

    Raises:
        NotFoundError: If the contract does not exist or neither parameter is given
        StoreError: If the contract could not be read
    """
    if share_token:
        return PhotoShareView(mode=CLIENT_VIEW, share_token=share_token)
    if not contract_id:
        raise NotFoundError('URL inválida', code='invalid_url')

    contract = db.get_document(CONTRACTS, contract_id)
    if contract is None:
        logger.warning("Photo share requested for missing contract %s", contract_id)
        raise NotFoundError('Contrato no encontrado', code='contract_not_found')
    return PhotoShareView(
        mode=ADMIN_VIEW,
        contract_id=contract_id,
        client_name=contract.get('clientName') or 'Cliente',
        contract=contract,
    )
