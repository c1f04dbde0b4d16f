# geonft/config.py
from __future__ import annotations

# Elements (not ranges) per nft transaction; each range takes two.
BATCH_SIZE = 1000

DEFAULT_TABLE = "filter"
DEFAULT_NFT = "nft"

ENV_DB = "GEONFT_DB"
ENV_KIND = "GEONFT_KIND"
ENV_TABLE = "GEONFT_TABLE"
ENV_SET = "GEONFT_SET"
ENV_NFT = "GEONFT_NFT"

# GeoLite2 Country CSV layout
MAXMIND_BLOCKS_IPV4_GLOB = "*-Blocks-IPv4.csv"
MAXMIND_BLOCKS_IPV6_GLOB = "*-Blocks-IPv6.csv"
MAXMIND_LOCATIONS_GLOB = "*-Locations-en.csv"
