"""Enumeration types for customer analytics."""

from enum import Enum


class Segment(str, Enum):
    CHAMPIONS = "Cliente Fiel"
    LOYAL = "Recorrente"
    AT_RISK = "Risco de Perda"
    LOST = "Inativo/Perdido"
    NEW = "Novo Cliente"


class HealthScore(str, Enum):
    EXCELLENT = "Excelente"
    GOOD = "Bom"
    WARNING = "Atenção"
    CRITICAL = "Crítico"


class ABCCategory(str, Enum):
    A = "Curva A"
    B = "Curva B"
    C = "Curva C"


class OpportunityTag(str, Enum):
    PREMIUM_FREIGHT = "Frete Premium"
    HIGH_VOLUME = "Alto Volume"
    RECOVERABLE = "Recuperável"


class AlertKind(str, Enum):
    TICKET_DROP = "ticket_drop"
    FREQUENCY_DROP = "frequency_drop"
    ANOMALY = "anomaly"


class AlertSeverity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"


class InsightCategory(str, Enum):
    OPPORTUNITY = "opportunity"
    RISK = "risk"
    ATTENTION = "attention"
    RETENTION = "retention"


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    NEUTRAL = "neutral"
