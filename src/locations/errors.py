"""Lokasyon yapılandırma hataları."""

from __future__ import annotations

from typing import Iterable, Optional


class LocationStructureError(Exception):
    """Tüm lokasyon yapılandırma hataları için temel sınıf."""
    pass


class PatternSyntaxError(LocationStructureError):
    """Desen metninde dengesiz veya tanınmayan parantez yapısı."""

    def __init__(self, message: str, pattern: str = "", position: Optional[int] = None):
        self.pattern = pattern
        self.position = position
        if position is not None:
            message = f"{message} (konum {position}: {pattern!r})"
        super().__init__(message)


class CapacityExceededError(LocationStructureError):
    """İstenen yapı, yapılandırılmış hane/etiket kapasitesini aşıyor."""

    def __init__(self, message: str, limit: int = 0, requested: int = 0):
        self.limit = limit
        self.requested = requested
        super().__init__(message)


class StructureValidationError(LocationStructureError):
    """Geçersiz zon yapısı isteği."""
    pass


class OccupiedBinConflictError(LocationStructureError):
    """Dolu gözler yeni yapıda yer almıyor ve açık bir politika seçilmedi."""

    def __init__(self, addresses: Iterable[str], total_affected_items: int = 0):
        self.addresses = tuple(addresses)
        self.total_affected_items = total_affected_items
        super().__init__(
            f"{len(self.addresses)} dolu göz yeni yapıda yer almıyor "
            f"({total_affected_items} adet ürün etkileniyor). "
            "Bloklama veya zorla kaldırma politikası seçilmelidir."
        )


class TransientBackendError(LocationStructureError):
    """Backend'in tekrar denenebilir geçici hatası."""
    pass
