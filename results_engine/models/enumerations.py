from enum import Enum


class RaterType(str, Enum):
    SELF = "self"
    MANAGER = "manager"
    PEER = "peer"
    DIRECT_REPORT = "direct_report"
    OTHER = "other"


class InvitationStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    REMINDED = "reminded"
    COMPLETED = "completed"      # Only completed invitations are scored
    EXPIRED = "expired"
    DECLINED = "declined"


class CCIBand(str, Enum):
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"
    VERY_HIGH = "Very High"


class CCIRaterPopulation(str, Enum):
    ALL = "all"                      # Every rater type, self included
    SELF = "self"                    # Self rating only
    OTHERS = "others"                # Every rater type except self
    OTHERS_OR_ALL = "others_or_all"  # Others if anyone else rated, else all


class TrendDirection(str, Enum):
    IMPROVED = "improved"
    DECLINED = "declined"
    STABLE = "stable"


class GapClassification(str, Enum):
    BLIND_SPOT = "blind_spot"            # Self rates higher than others
    HIDDEN_STRENGTH = "hidden_strength"  # Others rate higher than self
    ALIGNED = "aligned"
