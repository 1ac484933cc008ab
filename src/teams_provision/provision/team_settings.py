"""Fixed feature settings applied to every provisioned team."""

import copy
from typing import Any

_TEAM_SETTINGS: dict[str, Any] = {
    "memberSettings": {
        "allowCreateUpdateChannels": False,
        "allowDeleteChannels": False,
        "allowAddRemoveApps": False,
        "allowCreateUpdateRemoveTabs": False,
        "allowCreateUpdateRemoveConnectors": False,
    },
    "guestSettings": {
        "allowCreateUpdateChannels": False,
        "allowDeleteChannels": False,
    },
    "messagingSettings": {
        "allowUserEditMessages": True,
        "allowUserDeleteMessages": True,
        "allowOwnerDeleteMessages": True,
        "allowTeamMentions": True,
        "allowChannelMentions": True,
    },
    "funSettings": {
        "allowGiphy": True,
        "giphyContentRating": "moderate",
        "allowStickersAndMemes": True,
        "allowCustomMemes": True,
    },
}


def team_settings() -> dict[str, Any]:
    """Return a fresh copy of the team creation payload."""
    return copy.deepcopy(_TEAM_SETTINGS)
