"""Content record and API request/response schemas"""

from typing import Optional, List
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase keys on the wire"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Feature(CamelModel):
    """Feature card"""
    title: str
    content: str
    icon: str


class PricingTier(CamelModel):
    """Pricing plan with its ordered benefits"""
    name: str
    price: str
    description: str
    features: List[str]


class Testimonial(CamelModel):
    """Customer testimonial"""
    name: str
    role: str
    content: str
    avatar: Optional[str] = None


class FAQ(CamelModel):
    """Question and answer pair"""
    question: str
    answer: str


class ContentPayload(CamelModel):
    """Landing page content before the store assigns an identifier"""
    idea: Optional[str] = None
    logo_url: Optional[str] = None
    # Hero section
    hero_title: List[str]
    hero_description: str
    # Features section
    features_title: str
    features: List[Feature]
    # Pricing section
    pricing_title: str
    pricing_description: str
    pricing_tiers: List[PricingTier]
    # Testimonials section
    testimonials_title: str
    testimonials: List[Testimonial]
    # FAQ section
    faq_title: str
    faqs: List[FAQ]
    # CTA section
    cta_title: str
    cta_description: str


class ContentRecord(ContentPayload):
    """Persisted landing page content"""
    id: str

    @classmethod
    def from_payload(cls, record_id: str, payload: ContentPayload) -> "ContentRecord":
        return cls(id=record_id, **payload.model_dump())


class GenerateRequest(BaseModel):
    """POST /api/generator request"""
    idea: str = ""

    @field_validator("idea", mode="before")
    @classmethod
    def coerce_idea(cls, v):
        """Treat a missing idea as empty so the pipeline can report it"""
        if v is None:
            return ""
        if not isinstance(v, str):
            raise ValueError("idea must be a string")
        return v


class GenerationResult(CamelModel):
    """Identifiers of the records written for one generation"""
    generated_id: str
    dynamic_id: str


class IdeaResponse(BaseModel):
    """POST /api/generator/idea response"""
    idea: str


class DynamicPageRequest(CamelModel):
    """POST /api/dynamic-lp request - every field is optional"""
    logo_url: Optional[str] = None
    hero_title: Optional[List[str]] = None
    hero_description: Optional[str] = None
    features_title: Optional[str] = None
    features: Optional[List[Feature]] = None
    pricing_title: Optional[str] = None
    pricing_description: Optional[str] = None
    pricing_tiers: Optional[List[PricingTier]] = None
    testimonials_title: Optional[str] = None
    testimonials: Optional[List[Testimonial]] = None
    faq_title: Optional[str] = None
    faqs: Optional[List[FAQ]] = None
    cta_title: Optional[str] = None
    cta_description: Optional[str] = None

    def to_payload(self) -> ContentPayload:
        """Fill missing sections with placeholder content"""
        return ContentPayload(
            logo_url=self.logo_url,
            hero_title=self.hero_title if self.hero_title is not None else ["Build", "Test", "Ship"],
            hero_description=self.hero_description if self.hero_description is not None else "Your product description here...",
            features_title=self.features_title if self.features_title is not None else "Features",
            features=self.features or [],
            pricing_title=self.pricing_title if self.pricing_title is not None else "Pricing",
            pricing_description=self.pricing_description if self.pricing_description is not None else "We offer flexible plans...",
            pricing_tiers=self.pricing_tiers or [],
            testimonials_title=self.testimonials_title if self.testimonials_title is not None else "Testimonials",
            testimonials=self.testimonials or [],
            faq_title=self.faq_title if self.faq_title is not None else "FAQ",
            faqs=self.faqs or [],
            cta_title=self.cta_title if self.cta_title is not None else "Call To Action",
            cta_description=self.cta_description if self.cta_description is not None else "Sign up now!",
        )
