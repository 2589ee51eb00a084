from uuid import uuid4

from src.invitations.features.delete_invitations.router import (
    DELETE_INVITATIONS_URL,
    get_delete_invitations_write_model,
)
from src.invitations.features.delete_invitations.write_model import DeleteInvitationsWriteModel

HEADERS = {"X-Wedding-Id": str(uuid4())}


class InMemoryDeleteInvitationsWriteModel(DeleteInvitationsWriteModel):
    def __init__(self, invitations):
        self.invitations = set(invitations)

    async def delete_invitations(self, wedding_id, invitation_ids, user_id=None):
        found = self.invitations & set(invitation_ids)
        self.invitations -= found
        return len(found)


async def test_delete_invitations(client_factory):
    keep, drop = uuid4(), uuid4()
    write_model = InMemoryDeleteInvitationsWriteModel([keep, drop])
    overrides = {get_delete_invitations_write_model: lambda: write_model}

    async with client_factory(overrides) as client:
        response = await client.post(
            DELETE_INVITATIONS_URL, headers=HEADERS, json={"invitation_ids": [str(drop), str(uuid4())]}
        )

    assert response.status_code == 200
    assert response.json() == {"deleted": 1}
    assert write_model.invitations == {keep}
