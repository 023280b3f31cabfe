from typing import Dict, Iterable, Iterator, Optional

from telechat.remote.base import RemotePeer


class ChatCache:
    """
    chat_id (str) -> RemotePeer. Cada refresco es una foto nueva y completa:
    replace() sustituye el mapa entero, no mezcla con el anterior.
    Un fallo de get() es normal (la UI puede tener ids de una foto vieja).
    """
    def __init__(self):
        self._peers: Dict[str, RemotePeer] = {}

    def replace(self, peers: Iterable[RemotePeer]) -> None:
        self._peers = {p.chat_id: p for p in peers}

    def get(self, chat_id: str) -> Optional[RemotePeer]:
        return self._peers.get(chat_id)

    def clear(self) -> None:
        self._peers = {}

    def snapshot(self) -> Dict[str, RemotePeer]:
        return dict(self._peers)

    def __contains__(self, chat_id: object) -> bool:
        return chat_id in self._peers

    def __len__(self) -> int:
        return len(self._peers)

    def __iter__(self) -> Iterator[str]:
        return iter(self._peers)
