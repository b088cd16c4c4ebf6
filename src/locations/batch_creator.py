"""Hiyerarşik Toplu Oluşturucu - Lokasyon ağacını seviye seviye backend'de oluşturur.

Çocuk lokasyonlar üst lokasyonun backend tarafından atanan kimliğine ihtiyaç
duyar. Bu yüzden oluşturma fazlara ayrılır:

- Faz 1: kök lokasyonlar oluşturulur, (kardeş indeks yolu -> kimlik) haritası döner.
- Faz k+1: bir önceki fazda oluşturulan lokasyonların çocukları, o fazın
  haritasından üst kimliği çözülerek oluşturulur.

Bir faz (tekrar denemeler dahil) tamamen bitmeden sonraki faz başlamaz.
Oluşturulamayan lokasyonun alt ağacı hiç denenmez ve hata olarak raporlanır.
"""

from __future__ import annotations

import logging
import re
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping, Optional

from botocore.exceptions import ClientError

from src.locations.errors import TransientBackendError
from src.locations.pattern_expander import walk
from src.models.location import (
    BatchConfig,
    BatchResult,
    CreationFailure,
    LocationNode,
    LocationType,
    next_location_type,
)

logger = logging.getLogger(__name__)

CreateFn = Callable[[str, LocationType, Optional[str]], str]
ProgressFn = Callable[[int, int], None]

TRANSIENT_ERROR_CODES = {
    "ThrottlingException",
    "ProvisionedThroughputExceededException",
    "RequestLimitExceeded",
    "TooManyRequestsException",
    "InternalServerError",
    "ServiceUnavailable",
}

_RETRY_HINT = re.compile(r"retry in (\d+) seconds?", re.IGNORECASE)


def is_transient_error(error: BaseException) -> bool:
    """Hatanın tekrar denenebilir (rate limit / geçici) olup olmadığını döndürür."""
    if isinstance(error, TransientBackendError):
        return True
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code") in TRANSIENT_ERROR_CODES
    return "rate limit" in str(error).lower()


def retry_delay_for(error: BaseException, default: float) -> float:
    """Hata mesajındaki 'retry in N seconds' ipucunu, yoksa varsayılanı döndürür."""
    match = _RETRY_HINT.search(str(error))
    if match:
        return float(match.group(1))
    return default


@dataclass
class _Pending:
    # Kardeş indeks yolu: aynı isimli kardeşler farklı anahtar alır
    key: tuple[int, ...]
    path: tuple[str, ...]
    node: LocationNode
    location_type: LocationType

    @property
    def parent_key(self) -> tuple[int, ...]:
        return self.key[:-1]


class HierarchicalBatchCreator:
    """Lokasyon ağacını fazlar halinde, hız sınırlı batch'lerle oluşturur."""

    def __init__(
        self,
        create: CreateFn,
        config: Optional[BatchConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
        on_progress: Optional[ProgressFn] = None,
    ):
        self._create = create
        self.config = config or BatchConfig()
        self._sleep = sleep
        self._on_progress = on_progress
        self._cancel_event = threading.Event()
        self._processed = 0
        self._total = 0

    def cancel(self) -> None:
        """İşlemi iptal eder; devam eden batch tamamlanır, yenisi başlamaz."""
        self._cancel_event.set()

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_event.is_set()

    def create_hierarchy(
        self,
        roots: list[LocationNode],
        parent_id: Optional[str] = None,
        parent_type: Optional[LocationType] = None,
    ) -> BatchResult:
        self._cancel_event.clear()
        self._processed = 0
        self._total = sum(1 for _ in walk(roots))

        result = BatchResult()
        root_type = next_location_type(parent_type)
        phase = [_Pending((i,), (node.name,), node, root_type) for i, node in enumerate(roots)]
        # Kök fazı için üst kimlik haritası: boş yol -> verilen parent_id
        resolved: Mapping[tuple[int, ...], Optional[str]] = MappingProxyType({(): parent_id})

        depth = 0
        while phase:
            depth += 1
            logger.info(
                "Faz %d başlıyor: %d lokasyon (%s)", depth, len(phase), phase[0].location_type.value
            )
            resolved = self._run_phase(phase, resolved, result)

            next_phase = [
                _Pending(
                    item.key + (j,),
                    item.path + (child.name,),
                    child,
                    next_location_type(item.location_type),
                )
                for item in phase
                if item.key in resolved
                for j, child in enumerate(item.node.children)
            ]
            if self.cancel_requested:
                result.cancelled = True
                for pending in next_phase:
                    result.not_attempted.extend(n.name for _, n in walk([pending.node]))
                break
            phase = next_phase

        logger.info(
            "Toplu oluşturma bitti: %d başarılı, %d başarısız, %d denenmedi",
            result.succeeded,
            result.failed,
            len(result.not_attempted),
        )
        return result

    def _run_phase(
        self,
        phase: list[_Pending],
        previous: Mapping[tuple[int, ...], Optional[str]],
        result: BatchResult,
    ) -> Mapping[tuple[int, ...], Optional[str]]:
        """Bir fazı batch'ler halinde çalıştırır ve bu fazın kimlik haritasını döndürür."""
        size = max(1, self.config.batch_size)
        batches = [phase[i:i + size] for i in range(0, len(phase), size)]
        created: dict[tuple[int, ...], str] = {}

        with ThreadPoolExecutor(max_workers=size) as executor:
            for batch_num, batch in enumerate(batches):
                if self.cancel_requested:
                    logger.info("Toplu oluşturma iptal edildi")
                    result.cancelled = True
                    for item in (i for b in batches[batch_num:] for i in b):
                        result.not_attempted.extend(n.name for _, n in walk([item.node]))
                    break

                futures = []
                for index, item in enumerate(batch):
                    parent_id = previous.get(item.parent_key)
                    futures.append((item, parent_id, executor.submit(self._create_with_retry, item, parent_id)))
                    if index < len(batch) - 1:
                        self._sleep(self.config.delay_between_items)

                for item, parent_id, future in futures:
                    location_id, error = future.result()
                    if error is None:
                        created[item.key] = location_id
                        result.created[item.key] = location_id
                        result.paths[item.key] = item.path
                        logger.debug("Oluşturuldu: %s -> %s", "/".join(item.path), location_id)
                    else:
                        self._record_failure(item, parent_id, error, result)
                    self._report_progress()

                if batch_num < len(batches) - 1:
                    self._sleep(self.config.delay_between_batches)

        return MappingProxyType(created)

    def _create_with_retry(
        self, item: _Pending, parent_id: Optional[str]
    ) -> tuple[Optional[str], Optional[Exception]]:
        attempt = 0
        while True:
            try:
                location_id = self._create(item.node.name, item.location_type, parent_id)
                if not location_id:
                    return None, ValueError(f"Backend lokasyon kimliği döndürmedi: {item.node.name}")
                return location_id, None
            except Exception as e:
                if attempt < self.config.max_retries and is_transient_error(e):
                    delay = retry_delay_for(e, self.config.retry_delay)
                    attempt += 1
                    logger.warning(
                        "Geçici hata (%s), %.1fs sonra tekrar denenecek (%d/%d): %s",
                        item.node.name,
                        delay,
                        attempt,
                        self.config.max_retries,
                        e,
                    )
                    self._sleep(delay)
                    continue
                return None, e

    def _record_failure(
        self,
        item: _Pending,
        parent_id: Optional[str],
        error: Exception,
        result: BatchResult,
    ) -> None:
        logger.warning("Lokasyon oluşturulamadı: %s (%s)", item.node.name, error)
        result.failures.append(
            CreationFailure(
                name=item.node.name,
                location_type=item.location_type,
                error=error,
                parent_id=parent_id,
            )
        )
        child_type = next_location_type(item.location_type)
        for depth, descendant in walk(item.node.children):
            descendant_type = child_type
            for _ in range(depth):
                descendant_type = next_location_type(descendant_type)
            result.failures.append(
                CreationFailure(
                    name=descendant.name,
                    location_type=descendant_type,
                    error=f"Üst lokasyon oluşturulamadı: {item.node.name}",
                    skipped=True,
                )
            )
            self._report_progress()

    def _report_progress(self) -> None:
        self._processed += 1
        if self._on_progress:
            self._on_progress(self._processed, self._total)


def create_hierarchy(
    roots: list[LocationNode],
    parent_id: Optional[str],
    create: CreateFn,
    parent_type: Optional[LocationType] = None,
    config: Optional[BatchConfig] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> BatchResult:
    """Tek seferlik kullanım için HierarchicalBatchCreator kısayolu."""
    creator = HierarchicalBatchCreator(create, config=config, sleep=sleep)
    return creator.create_hierarchy(roots, parent_id=parent_id, parent_type=parent_type)
