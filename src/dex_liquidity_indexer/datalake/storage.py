"""Read interface to the indexer's entity store and an in-memory snapshot of it."""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Protocol

from ..utils.constants import BUNDLE_ID, pair_map_key
from .schemas import Bundle, Pair, PairIndexEntry, Token


class EntityStore(Protocol):
    """Keyed lookups the pricing core performs against the indexer's store.

    Every lookup returns ``None`` when the record does not exist; callers
    branch on that instead of catching exceptions.
    """

    def load_token(self, token_id: str) -> Optional[Token]:
        ...

    def load_pair(self, pair_id: str) -> Optional[Pair]:
        ...

    def load_bundle(self, bundle_id: str = BUNDLE_ID) -> Optional[Bundle]:
        ...

    def load_pair_index(self, key: str) -> Optional[PairIndexEntry]:
        ...


class InMemoryEntityStore:
    """Dictionary-backed store used to hand a consistent snapshot to the core."""

    def __init__(
        self,
        tokens: Optional[Iterable[Token]] = None,
        pairs: Optional[Iterable[Pair]] = None,
        bundle: Optional[Bundle] = None,
        *,
        index_pairs: bool = True,
    ) -> None:
        self._tokens: Dict[str, Token] = {}
        self._pairs: Dict[str, Pair] = {}
        self._bundles: Dict[str, Bundle] = {}
        self._pair_index: Dict[str, PairIndexEntry] = {}
        for token in tokens or ():
            self.save_token(token)
        for pair in pairs or ():
            self.save_pair(pair, index=index_pairs)
        if bundle is not None:
            self.save_bundle(bundle)

    def load_token(self, token_id: str) -> Optional[Token]:
        return self._tokens.get(token_id)

    def load_pair(self, pair_id: str) -> Optional[Pair]:
        return self._pairs.get(pair_id)

    def load_bundle(self, bundle_id: str = BUNDLE_ID) -> Optional[Bundle]:
        return self._bundles.get(bundle_id)

    def load_pair_index(self, key: str) -> Optional[PairIndexEntry]:
        return self._pair_index.get(key)

    def save_token(self, token: Token) -> None:
        self._tokens[token.id] = token

    def save_pair(self, pair: Pair, *, index: bool = True) -> None:
        self._pairs[pair.id] = pair
        if index:
            self.index_pair(pair)

    def save_bundle(self, bundle: Bundle) -> None:
        self._bundles[bundle.id] = bundle

    def save_pair_index(self, entry: PairIndexEntry) -> None:
        self._pair_index[entry.id] = entry

    def index_pair(self, pair: Pair) -> PairIndexEntry:
        """Append ``pair`` to the index entry of its two tokens, creating it if needed."""

        key = pair_map_key(pair.token0, pair.token1)
        entry = self._pair_index.get(key)
        if entry is None:
            entry = PairIndexEntry(id=key)
            self._pair_index[key] = entry
        if pair.id not in entry.pair_ids:
            entry.pair_ids.append(pair.id)
        return entry


__all__ = ["EntityStore", "InMemoryEntityStore"]
