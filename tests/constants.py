"""Ids of the built-in library entries used across tests."""

COZY_LOOK_ID = "00000000-0000-0000-0000-000000000001"
STUDIO_LOOK_ID = "00000000-0000-0000-0000-000000000004"
LENS_24_ID = "00000000-0000-0000-0001-000000000001"
LENS_35_ID = "00000000-0000-0000-0001-000000000002"
LENS_50_ID = "00000000-0000-0000-0001-000000000003"
LENS_85_ID = "00000000-0000-0000-0001-000000000004"
FUR_PACK_ID = "00000000-0000-0000-0002-000000000001"
FABRIC_PACK_ID = "00000000-0000-0000-0002-000000000002"
DUST_PACK_ID = "00000000-0000-0000-0003-000000000001"
