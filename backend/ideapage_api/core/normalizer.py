"""
Content normalizer - reshapes loosely structured model output into a ContentPayload.

The model's structured-output conformance is unreliable: the same field may
arrive at the top level, nested under a lowercase section key, under a
capitalized section key, or under "<section>Section". Each field is described
by a FieldSpec holding its ordered extraction strategies and its default, so
lookup is a table rather than a chain of conditionals.

Normalization repairs instead of rejecting: short lists are padded, odd shapes
are coerced, and every text leaf ends up a string.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from ideapage_api.core.telemetry import PipelineObserver
from ideapage_api.models.schemas import FAQ, ContentPayload, Feature, PricingTier, Testimonial

logger = logging.getLogger(__name__)

FEATURE_ICONS = ["⚡️", "🛠️", "🔒", "📱", "🌐", "✨"]
DEFAULT_HERO_TITLE = ["Build", "Launch", "Scale"]

HERO_TITLE_LENGTH = 3
FEATURE_COUNT = 6
MIN_PRICING_TIERS = 2
MIN_TESTIMONIALS = 3
MIN_FAQS = 4

DEFAULT_TESTIMONIAL_COUNT = 8
DEFAULT_FAQ_COUNT = 6

DEFAULT_PRICING_TIERS = [
    {
        "name": "Basic",
        "price": "$29/month",
        "description": "Perfect for getting started",
        "features": ["Core features", "Basic support", "Up to 1000 users", "1 project"],
    },
    {
        "name": "Pro",
        "price": "$99/month",
        "description": "For growing businesses",
        "features": ["All Basic features", "Priority support", "Unlimited users", "Unlimited projects"],
    },
]

DEFAULT_TESTIMONIAL_CONTENT = (
    "This product has transformed how we work. The implementation was smooth, and the results "
    "were immediate. Highly recommended for any business looking to improve their operations."
)
DEFAULT_FAQ_ANSWER = (
    "We understand this is an important consideration. Our solution is designed to address this "
    "exact need, providing you with the tools and support necessary for success."
)


# ============================================================================
# Extraction strategies
# ============================================================================

@dataclass(frozen=True)
class ExtractionStrategy:
    """One candidate location of a field inside the model's document"""
    name: str
    path: Tuple[str, ...]

    def extract(self, document: Dict[str, Any]) -> Any:
        """Follow ``path``; None when any step is missing or not an object"""
        node: Any = document
        for key in self.path:
            if not isinstance(node, dict):
                return None
            node = node.get(key)
        return node


@dataclass(frozen=True)
class Section:
    """Alternative container keys the model uses for one page section"""
    lower: str
    upper: str
    suffixed: str


HERO = Section("hero", "Hero", "heroSection")
FEATURES = Section("features", "Features", "featuresSection")
PRICING = Section("pricing", "Pricing", "pricingSection")
TESTIMONIALS = Section("testimonials", "Testimonials", "testimonialsSection")
FAQS = Section("faq", "FAQ", "faqSection")
CTA = Section("cta", "CTA", "ctaSection")


def strategies_for(top_level_key: str, section: Section, nested_key: str) -> Tuple[ExtractionStrategy, ...]:
    """Ordered candidates: top level, then each section container"""
    return (
        ExtractionStrategy("direct", (top_level_key,)),
        ExtractionStrategy("nested-lower", (section.lower, nested_key)),
        ExtractionStrategy("nested-upper", (section.upper, nested_key)),
        ExtractionStrategy("nested-section", (section.suffixed, nested_key)),
    )


@dataclass(frozen=True)
class FieldSpec:
    """(field, candidate paths, default) triple"""
    field: str
    strategies: Tuple[ExtractionStrategy, ...]
    kind: str  # "text" | "list"
    default: Any = None
    accepts_string: bool = False

    def matches(self, value: Any) -> bool:
        if self.kind == "list":
            return isinstance(value, list) or (self.accepts_string and isinstance(value, str) and bool(value.strip()))
        return bool(as_text(value))

    def lookup(self, document: Dict[str, Any]) -> Tuple[Any, str]:
        """Return the first matching value and the name of the strategy that found it"""
        for strategy in self.strategies:
            value = strategy.extract(document)
            if value is not None and self.matches(value):
                return value, strategy.name
        return None, "default"


FIELD_SPECS: Tuple[FieldSpec, ...] = (
    FieldSpec("hero_title", strategies_for("heroTitle", HERO, "heroTitle"), "list", accepts_string=True),
    FieldSpec("hero_description", strategies_for("heroDescription", HERO, "heroDescription"), "text",
              "Transform your business with our solution"),
    FieldSpec("features_title", strategies_for("featuresTitle", FEATURES, "title"), "text", "Features"),
    FieldSpec("features", strategies_for("features", FEATURES, "features"), "list"),
    FieldSpec("pricing_title", strategies_for("pricingTitle", PRICING, "title"), "text", "Pricing"),
    FieldSpec("pricing_description", strategies_for("pricingDescription", PRICING, "description"), "text",
              "Choose the plan that's right for you"),
    FieldSpec("pricing_tiers", strategies_for("pricingTiers", PRICING, "pricingTiers"), "list"),
    FieldSpec("testimonials_title", strategies_for("testimonialsTitle", TESTIMONIALS, "title"), "text",
              "What Our Customers Say"),
    FieldSpec("testimonials", strategies_for("testimonials", TESTIMONIALS, "testimonials"), "list"),
    FieldSpec("faq_title", strategies_for("faqTitle", FAQS, "title"), "text", "Frequently Asked Questions"),
    FieldSpec("faqs", strategies_for("faqs", FAQS, "faqs"), "list"),
    FieldSpec("cta_title", strategies_for("ctaTitle", CTA, "title"), "text", "Get Started Today"),
    FieldSpec("cta_description", strategies_for("ctaDescription", CTA, "description"), "text",
              "Join thousands of satisfied customers"),
)


# ============================================================================
# Coercion helpers
# ============================================================================

def as_text(value: Any) -> str:
    """Coerce a leaf value to stripped text; objects count as missing"""
    if value is None or isinstance(value, dict):
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        return " ".join(t for t in (as_text(v) for v in value) if t)
    return str(value).strip()


def _first_text(item: Dict[str, Any], *keys: str) -> str:
    for key in keys:
        text = as_text(item.get(key))
        if text:
            return text
    return ""


def _usable(item: Any) -> bool:
    return isinstance(item, dict) or bool(as_text(item))


# ============================================================================
# Repair rules
# ============================================================================

def repair_hero_title(raw: Any) -> List[str]:
    """Exactly three entries; a single period-delimited entry is split first"""
    if isinstance(raw, str):
        raw = [raw]
    entries = [t for t in (as_text(v) for v in (raw or [])) if t]

    if len(entries) == 1 and "." in entries[0]:
        entries = [part.strip() for part in entries[0].split(".") if part.strip()]

    entries = entries + DEFAULT_HERO_TITLE[len(entries):]
    return entries[:HERO_TITLE_LENGTH]


def feature_content_for(title: str) -> str:
    return f"Leverage the power of {title} to transform your business."


def _feature_from(item: Any, index: int) -> Feature:
    icon_default = FEATURE_ICONS[index % len(FEATURE_ICONS)]
    if isinstance(item, dict):
        title = _first_text(item, "title", "name") or f"Feature {index + 1}"
        return Feature(
            title=title,
            content=_first_text(item, "content", "description") or feature_content_for(title),
            icon=_first_text(item, "icon") or icon_default,
        )
    title = as_text(item)
    return Feature(title=title, content=feature_content_for(title), icon=icon_default)


def repair_features(raw: Optional[List[Any]]) -> List[Feature]:
    """Exactly FEATURE_COUNT features; strings are promoted, short lists padded"""
    items = [item for item in (raw or []) if _usable(item)]

    if not items:
        return [
            Feature(
                title=f"Feature {i + 1}",
                content="This feature helps you achieve your goals more efficiently.",
                icon=FEATURE_ICONS[i % len(FEATURE_ICONS)],
            )
            for i in range(FEATURE_COUNT)
        ]

    features = [_feature_from(item, i) for i, item in enumerate(items[:FEATURE_COUNT])]
    existing = len(features)
    for i in range(FEATURE_COUNT - existing):
        features.append(Feature(
            title=f"Additional Feature {i + 1}",
            content="This feature enhances your experience and productivity.",
            icon=FEATURE_ICONS[(existing + i) % len(FEATURE_ICONS)],
        ))
    return features


def _default_tier(index: int) -> PricingTier:
    return PricingTier(**DEFAULT_PRICING_TIERS[index % len(DEFAULT_PRICING_TIERS)])


def _tier_from(item: Any, index: int) -> PricingTier:
    fallback_benefits = list(DEFAULT_PRICING_TIERS[index % len(DEFAULT_PRICING_TIERS)]["features"])
    if not isinstance(item, dict):
        return PricingTier(
            name=as_text(item),
            price="$0",
            description="Get started with our basic plan",
            features=fallback_benefits,
        )
    benefits = item.get("features")
    benefits = [t for t in (as_text(b) for b in benefits) if t] if isinstance(benefits, list) else []
    return PricingTier(
        name=_first_text(item, "name", "title") or "Basic",
        price=_first_text(item, "price") or "$0",
        description=_first_text(item, "description") or "Get started with our basic plan",
        features=benefits or fallback_benefits,
    )


def repair_pricing_tiers(raw: Optional[List[Any]]) -> List[PricingTier]:
    """At least MIN_PRICING_TIERS tiers, each with a non-empty benefit list"""
    if raw is None:
        return [_default_tier(i) for i in range(len(DEFAULT_PRICING_TIERS))]
    tiers = [_tier_from(item, i) for i, item in enumerate(x for x in raw if _usable(x))]
    while len(tiers) < MIN_PRICING_TIERS:
        tiers.append(_default_tier(len(tiers)))
    return tiers


def _default_testimonial(index: int) -> Testimonial:
    return Testimonial(
        name=f"Customer {index + 1}",
        role="Satisfied User",
        content=DEFAULT_TESTIMONIAL_CONTENT,
        avatar=None,
    )


def _testimonial_from(item: Any) -> Testimonial:
    if not isinstance(item, dict):
        return Testimonial(name="Happy Customer", role="Satisfied User", content=as_text(item), avatar=None)
    avatar = item.get("avatar")
    return Testimonial(
        name=_first_text(item, "name") or "Happy Customer",
        role=_first_text(item, "role", "position") or "Satisfied User",
        content=_first_text(item, "content", "testimonial") or "This product has transformed our business.",
        avatar=avatar.strip() if isinstance(avatar, str) and avatar.strip() else None,
    )


def repair_testimonials(raw: Optional[List[Any]]) -> List[Testimonial]:
    """At least MIN_TESTIMONIALS testimonials; a missing list gets the default set"""
    if raw is None:
        return [_default_testimonial(i) for i in range(DEFAULT_TESTIMONIAL_COUNT)]
    testimonials = [_testimonial_from(item) for item in raw if _usable(item)]
    while len(testimonials) < MIN_TESTIMONIALS:
        testimonials.append(_default_testimonial(len(testimonials)))
    return testimonials


def _default_faq(index: int) -> FAQ:
    return FAQ(question=f"Common Question {index + 1}?", answer=DEFAULT_FAQ_ANSWER)


def _faq_from(item: Any) -> FAQ:
    if not isinstance(item, dict):
        return FAQ(question=as_text(item), answer="We're here to help you succeed.")
    return FAQ(
        question=_first_text(item, "question") or "How can we help?",
        answer=_first_text(item, "answer") or "We're here to help you succeed.",
    )


def repair_faqs(raw: Optional[List[Any]]) -> List[FAQ]:
    """At least MIN_FAQS entries; a missing list gets the default set"""
    if raw is None:
        return [_default_faq(i) for i in range(DEFAULT_FAQ_COUNT)]
    faqs = [_faq_from(item) for item in raw if _usable(item)]
    while len(faqs) < MIN_FAQS:
        faqs.append(_default_faq(len(faqs)))
    return faqs


LIST_REPAIRS: Dict[str, Callable[[Any], List[Any]]] = {
    "hero_title": repair_hero_title,
    "features": repair_features,
    "pricing_tiers": repair_pricing_tiers,
    "testimonials": repair_testimonials,
    "faqs": repair_faqs,
}


# ============================================================================
# Normalizer
# ============================================================================

class ContentNormalizer:
    """Applies FIELD_SPECS and the repair rules to one parsed document"""

    def __init__(self, field_specs: Tuple[FieldSpec, ...] = FIELD_SPECS):
        self.field_specs = field_specs

    def normalize(
        self,
        document: Dict[str, Any],
        idea: Optional[str] = None,
        observer: Optional[PipelineObserver] = None,
    ) -> ContentPayload:
        observer = observer or PipelineObserver()
        values: Dict[str, Any] = {}
        sources: Dict[str, str] = {}

        for spec in self.field_specs:
            raw, source = spec.lookup(document if isinstance(document, dict) else {})
            sources[spec.field] = source
            if spec.kind == "list":
                values[spec.field] = LIST_REPAIRS[spec.field](raw)
            else:
                values[spec.field] = as_text(raw) or spec.default

        defaulted = [field for field, source in sources.items() if source == "default"]
        logger.debug(f"[NORMALIZER] Field sources: {sources}")
        if defaulted:
            observer.log(f"Filled missing fields with defaults: {', '.join(defaulted)}")
        observer.success(
            "normalize",
            hero_title=sources["hero_title"],
            features=sources["features"],
            defaulted=len(defaulted),
        )

        return ContentPayload(idea=idea, **values)


def normalize_content(document: Dict[str, Any], idea: Optional[str] = None) -> ContentPayload:
    """Normalize with the default field table"""
    return ContentNormalizer().normalize(document, idea=idea)
