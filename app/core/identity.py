"""Per-request authenticated actor"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict


class Provenance(str, Enum):
    session = "session"
    token = "token"


@dataclass(frozen=True)
class Identity:
    """
    The authenticated actor for one request.

    ``id`` is the integer user id and is usable as a foreign key whichever
    credential produced the identity.
    """
    id: int
    name: str
    surname: str
    email: str
    provenance: Provenance = Provenance.session

    @classmethod
    def from_claims(cls, claims: Dict[str, Any], provenance: Provenance) -> "Identity":
        """Build from a token payload or stored session dict; raises KeyError/ValueError/TypeError if malformed"""
        return cls(
            id=int(claims["id"]),
            name=str(claims["name"]),
            surname=str(claims["surname"]),
            email=str(claims["email"]),
            provenance=provenance,
        )

    def with_provenance(self, provenance: Provenance) -> "Identity":
        return replace(self, provenance=provenance)

    def public_fields(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "surname": self.surname,
            "email": self.email,
        }
