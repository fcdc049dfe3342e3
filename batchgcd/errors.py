# =============================================================================
# Fehlerklassen


class BatchGCDError(Exception):
    """Basisklasse aller Fehler dieses Pakets."""


class TooFewNumbersError(BatchGCDError, ValueError):
    """
    Vorbedingung verletzt: weniger als zwei Zahlen oder eine nicht positive Zahl.
    Wird vor jedem Baumaufbau geworfen.
    """


class TreeInvariantError(BatchGCDError, RuntimeError):
    """
    Interner Logikfehler beim Produkt- oder Restbaum (z.B. leerer Bereich i >= j).
    Wird nie abgefangen und bricht die gesamte Berechnung ab.
    """


class MalformedKeyError(BatchGCDError, ValueError):
    """Eingabe konnte nicht als Modulus/Schlüssel dekodiert werden."""


class ConfigError(BatchGCDError, ValueError):
    """Ungültiger Konfigurationswert."""
