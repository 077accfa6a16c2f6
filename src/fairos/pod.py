"""Pod operations: create, open, share and inspect storage namespaces."""

from dataclasses import dataclass

from fairos.base import BaseClient
from fairos.schemas import (
    PodListResponse,
    PodReceiveInfoResponse,
    PodShareResponse,
    PodStatResponse,
    PresentResponse,
)

DOMAIN = "pod"


@dataclass(frozen=True)
class PodInfo:
    name: str
    address: str


@dataclass(frozen=True)
class SharedPodInfo:
    name: str
    address: str
    username: str
    user_address: str
    shared_time: str


class PodOperations(BaseClient):
    async def create_pod(self, username: str, name: str, password: str) -> None:
        await self._post(
            DOMAIN, "/pod/new", {"pod_name": name, "password": password}, username=username
        )

    async def open_pod(self, username: str, name: str, password: str) -> None:
        await self._post(
            DOMAIN, "/pod/open", {"pod_name": name, "password": password}, username=username
        )

    async def close_pod(self, username: str, name: str) -> None:
        await self._post(DOMAIN, "/pod/close", {"pod_name": name}, username=username)

    async def sync_pod(self, username: str, name: str) -> None:
        await self._post(DOMAIN, "/pod/sync", {"pod_name": name}, username=username)

    async def share_pod(self, username: str, name: str, password: str) -> str:
        """Share a pod. Returns the sharing reference for receive_shared_pod()."""
        res, _ = await self._post(
            DOMAIN,
            "/pod/share",
            {"pod_name": name, "password": password},
            username=username,
            model=PodShareResponse,
        )
        return res.pod_sharing_reference

    async def delete_pod(self, username: str, name: str, password: str) -> None:
        await self._delete(
            DOMAIN, "/pod/delete", {"pod_name": name, "password": password}, username=username
        )

    async def pod_exists(self, username: str, name: str) -> bool:
        res = await self._get(
            DOMAIN, "/pod/present", {"pod_name": name}, username=username, model=PresentResponse
        )
        return res.present

    async def list_pods(self, username: str) -> tuple[list[str], list[str]]:
        """Returns (own pods, pods shared with the user), each sorted by name."""
        res = await self._get(DOMAIN, "/pod/ls", username=username, model=PodListResponse)
        return sorted(res.pod_name), sorted(res.shared_pod_name)

    async def pod_info(self, username: str, name: str) -> PodInfo:
        res = await self._get(
            DOMAIN, "/pod/stat", {"pod_name": name}, username=username, model=PodStatResponse
        )
        return PodInfo(name=res.pod_name, address=res.address)

    async def receive_shared_pod(self, username: str, reference: str) -> None:
        await self._get(DOMAIN, "/pod/receive", {"sharing_ref": reference}, username=username)

    async def shared_pod_info(self, username: str, reference: str) -> SharedPodInfo:
        res = await self._get(
            DOMAIN,
            "/pod/receiveinfo",
            {"sharing_ref": reference},
            username=username,
            model=PodReceiveInfoResponse,
        )
        return SharedPodInfo(
            name=res.pod_name,
            address=res.pod_address,
            username=res.user_name,
            user_address=res.user_address,
            shared_time=res.shared_time,
        )


__all__ = ["PodInfo", "PodOperations", "SharedPodInfo"]
