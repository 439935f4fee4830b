"""
Constants shared by the vault tests: a manual-clock start time, role
addresses and a two-token universe (token A is the numeraire).
"""
from managed_vault.core.custom_types import token_values
from managed_vault.core.mathutils import ONE

T0 = 1_700_000_000
OWNER = "0x00000000000000000000000000000000000000aa"
MANAGER = "0x00000000000000000000000000000000000000bb"
OTHER_MANAGER = "0x00000000000000000000000000000000000000cc"
STRANGER = "0x00000000000000000000000000000000000000ee"
TOKEN_A = "0x1000000000000000000000000000000000000001"
TOKEN_B = "0x2000000000000000000000000000000000000002"
TOKENS = [TOKEN_A, TOKEN_B]
HALF = ONE // 2


def tv(values):
    """(token, value) vector in canonical order."""
    return token_values(TOKENS, list(values))
