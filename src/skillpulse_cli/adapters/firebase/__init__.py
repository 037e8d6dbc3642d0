"""Firebase adapter module - Remote storage and authentication."""

from skillpulse_cli.adapters.firebase.auth import FirebaseIdentityProvider
from skillpulse_cli.adapters.firebase.firestore import FirestoreDocumentStore

__all__ = ["FirebaseIdentityProvider", "FirestoreDocumentStore"]
