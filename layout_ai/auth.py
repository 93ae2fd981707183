"""layout_ai.auth

Credential resolution for the remote intent model.

Supported credentials, checked in order:
- Azure OpenAI with an API key (AZURE_OPENAI_API_KEY)
- Azure OpenAI with Managed Identity, only when AZURE_OPENAI_AUTH_MODE=msi
- OpenAI with an API key (OPENAI_API_KEY)

Policy:
- Azure OpenAI needs AZURE_OPENAI_ENDPOINT and AZURE_OPENAI_CHAT_DEPLOYMENT in addition to a credential.
- Managed Identity is never picked implicitly: without an explicit key or msi mode there is no
  credential, and the recommender runs its rule-based extractor. That is not an error.

Environment variables
---------------------
  - AZURE_OPENAI_AUTH_MODE: auto | msi | apikey   (default auto)
  - AZURE_OPENAI_API_KEY: (optional) Azure OpenAI resource key
  - AZURE_MSI_CLIENT_ID: (optional) user-assigned managed identity client_id
  - OPENAI_API_KEY: (optional) OpenAI key
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

from azure.identity import ManagedIdentityCredential, get_bearer_token_provider

if TYPE_CHECKING:
    from layout_ai.config import Settings

_SCOPE_COGSERV = "https://cognitiveservices.azure.com/.default"


def _norm(v: str | None) -> str:
    return (v or "").strip().lower()


def get_msi_client_id() -> str | None:
    v = os.getenv("AZURE_MSI_CLIENT_ID")
    return v.strip() if v and v.strip() else None


def get_msi_credential() -> ManagedIdentityCredential:
    """Create a ManagedIdentityCredential using client_id when provided."""
    client_id = get_msi_client_id()
    if client_id:
        return ManagedIdentityCredential(client_id=client_id)
    return ManagedIdentityCredential()


def get_aoai_auth_mode() -> str:
    return _norm(os.getenv("AZURE_OPENAI_AUTH_MODE", "auto")) or "auto"


def get_aoai_api_key() -> str | None:
    v = os.getenv("AZURE_OPENAI_API_KEY")
    return v.strip() if v and v.strip() else None


def azure_openai_configured(settings: "Settings") -> bool:
    """Azure OpenAI is usable when endpoint + deployment exist and a credential is explicit."""
    if not settings.azure_openai_endpoint or not settings.azure_openai_chat_deployment:
        return False
    mode = get_aoai_auth_mode()
    if mode == "msi":
        return True
    return bool(get_aoai_api_key())


def extractor_credentials_available(settings: "Settings") -> bool:
    return azure_openai_configured(settings) or bool(settings.openai_api_key)


def get_aoai_client_kwargs() -> dict[str, Any]:
    """Kwargs for openai.AzureOpenAI: either api_key or azure_ad_token_provider."""
    if get_aoai_auth_mode() == "msi":
        return {"azure_ad_token_provider": get_bearer_token_provider(get_msi_credential(), _SCOPE_COGSERV)}
    return {"api_key": get_aoai_api_key()}
