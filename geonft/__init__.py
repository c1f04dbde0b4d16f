"""geonft: build minimal IPv4 range sets per country for nftables."""

__version__ = "0.1.0"
