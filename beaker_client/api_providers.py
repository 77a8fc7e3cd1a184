import os
from enum import Enum

from algosdk.v2client.algod import AlgodClient

__all__ = [
    "DEFAULT_ALGOD_ADDRESS",
    "DEFAULT_ALGOD_TOKEN",
    "APIProvider",
    "AlgoNode",
    "Localnet",
    "Network",
    "get_algod_client",
]

DEFAULT_ALGOD_ADDRESS = "http://localhost:4001"
DEFAULT_ALGOD_TOKEN = "a" * 64

#: environment variables read by get_algod_client
ALGOD_SERVER_ENV = "ALGOD_SERVER"
ALGOD_TOKEN_ENV = "ALGOD_TOKEN"


class Network(Enum):
    """Provides consistent way to reference the most common network options"""

    MainNet = "MainNet"
    TestNet = "TestNet"
    BetaNet = "BetaNet"
    LocalNet = "LocalNet"


class APIProvider:
    """abstract class to provide interface for API providers"""

    algod_hosts: dict[Network, str] = {}

    def __init__(self, network: Network):
        self.network = network

    def algod(self, token: str = "") -> AlgodClient:
        """return an algod client based on the provider used and network it was initialized with"""
        if self.network not in self.algod_hosts:
            raise ValueError(f"Unrecognized network: {self.network}")
        return AlgodClient(token, self.algod_hosts[self.network])


class AlgoNode(APIProvider):
    algod_hosts = {
        Network.MainNet: "https://mainnet-api.algonode.cloud",
        Network.TestNet: "https://testnet-api.algonode.cloud",
        Network.BetaNet: "https://betanet-api.algonode.cloud",
    }


class Localnet(APIProvider):
    default_host = "http://localhost"
    default_algod_port: int = 4001
    default_token: str = DEFAULT_ALGOD_TOKEN

    def __init__(self, network: Network = Network.LocalNet):
        super().__init__(network)

    # purposely doesn't check which network because it may
    # be set up to follow mainnet/testnet
    def algod(self, token: str = default_token) -> AlgodClient:
        address = f"{self.default_host}:{self.default_algod_port}"
        return AlgodClient(token, address)


def get_algod_client(
    address: str | None = None, token: str | None = None
) -> AlgodClient:
    """
    Build an algod client, falling back to the ALGOD_SERVER / ALGOD_TOKEN
    environment variables and then to the local node defaults
    """
    if address is None:
        address = os.environ.get(ALGOD_SERVER_ENV, DEFAULT_ALGOD_ADDRESS)
    if token is None:
        token = os.environ.get(ALGOD_TOKEN_ENV, DEFAULT_ALGOD_TOKEN)
    return AlgodClient(token, address)
