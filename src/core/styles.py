"""Headshot style catalog and prompt builders.

Two prompt families live here:

- ``HEADSHOT_STYLES`` drive the stateless identity-preserving models. Each
  prompt is an instruction to transform the customer's reference photo,
  with the outfit filled in per detected gender where the style has a
  women's variant.
- ``TUNE_PROMPTS`` drive generation against a trained Astria tune, where the
  subject is addressed by the tune's trigger word ``person``.
"""

import math
from dataclasses import dataclass
from typing import Literal

from src.core.pricing import PricingTier

Gender = Literal["male", "female"]


@dataclass(frozen=True)
class HeadshotStyle:
    """A named look with the prompt used to render it.

    ``template`` holds an ``{outfit}`` placeholder; ``outfit_female``
    replaces ``outfit`` for women where the clothing differs.
    """

    id: str
    name: str
    category: str
    template: str
    outfit: str
    outfit_female: str | None = None

    def outfit_for(self, gender: Gender | None = None) -> str:
        if gender == "female" and self.outfit_female:
            return self.outfit_female
        return self.outfit

    def prompt_for(self, gender: Gender | None = None) -> str:
        """Render the prompt with the outfit for ``gender``."""
        return self.template.format(outfit=self.outfit_for(gender))

    @property
    def prompt(self) -> str:
        return self.prompt_for(None)


HEADSHOT_STYLES: tuple[HeadshotStyle, ...] = (
    HeadshotStyle(
        id="corporate-navy",
        name="Corporate Navy",
        category="corporate",
        template="Transform this into a professional corporate headshot. Clean white background, soft studio lighting, wearing {outfit}, LinkedIn profile photo style, high resolution, sharp focus on face",
        outfit="a navy blue suit with white shirt",
        outfit_female="a tailored navy blue blazer with a crisp white blouse",
    ),
    HeadshotStyle(
        id="corporate-gray",
        name="Corporate Gray",
        category="corporate",
        template="Transform this into a professional corporate headshot. Clean white background, soft studio lighting, wearing {outfit}, professional business portrait, high resolution, sharp focus",
        outfit="a charcoal gray suit",
        outfit_female="a tailored charcoal gray blazer with a silk blouse",
    ),
    HeadshotStyle(
        id="corporate-black",
        name="Corporate Classic",
        category="corporate",
        template="Transform this into a professional corporate headshot. Gradient gray background, studio lighting, wearing {outfit}, executive portrait style, high resolution",
        outfit="a black suit with crisp white shirt",
        outfit_female="a sharp black suit with a structured white top",
    ),
    HeadshotStyle(
        id="business-casual-blue",
        name="Business Casual Blue",
        category="business-casual",
        template="Transform this into a professional headshot. Soft gray background, natural lighting, wearing {outfit}, friendly approachable expression, modern professional look",
        outfit="a light blue button-up shirt",
    ),
    HeadshotStyle(
        id="business-casual-white",
        name="Business Casual White",
        category="business-casual",
        template="Transform this into a professional headshot. Soft neutral background, natural lighting, wearing {outfit}, relaxed professional style, approachable",
        outfit="a crisp white shirt, open collar",
    ),
    HeadshotStyle(
        id="business-casual-polo",
        name="Smart Casual",
        category="business-casual",
        template="Transform this into a professional headshot. Light gray background, soft lighting, wearing {outfit}, smart casual business style, friendly and professional",
        outfit="a navy polo shirt",
        outfit_female="a navy fine-knit top",
    ),
    HeadshotStyle(
        id="creative-turtleneck",
        name="Creative Professional",
        category="creative",
        template="Transform this into a stylish professional headshot. Minimalist white background, dramatic studio lighting, wearing {outfit}, creative industry style, designer aesthetic",
        outfit="a black turtleneck",
    ),
    HeadshotStyle(
        id="creative-modern",
        name="Modern Creative",
        category="creative",
        template="Transform this into a modern professional headshot. Clean white background, soft artistic lighting, wearing {outfit}, contemporary creative professional look",
        outfit="a dark sweater",
    ),
    HeadshotStyle(
        id="outdoor-natural",
        name="Natural Light",
        category="outdoor",
        template="Transform this into a professional outdoor headshot. Natural greenery background with soft bokeh, golden hour lighting, wearing {outfit}, warm natural tones, approachable and friendly expression",
        outfit="a casual but professional light jacket",
    ),
    HeadshotStyle(
        id="outdoor-urban",
        name="Urban Professional",
        category="outdoor",
        template="Transform this into a professional urban headshot. Blurred city background, natural daylight, wearing {outfit}, modern urban professional style",
        outfit="smart casual attire",
    ),
    HeadshotStyle(
        id="executive-classic",
        name="Executive Classic",
        category="executive",
        template="Transform this into an executive headshot. Gradient gray background, premium studio lighting, wearing {outfit}, CEO portrait style, authoritative yet approachable",
        outfit="a black suit with white shirt",
        outfit_female="a black tailored suit with a white silk blouse",
    ),
    HeadshotStyle(
        id="executive-modern",
        name="Executive Modern",
        category="executive",
        template="Transform this into a modern executive headshot. Dark gradient background, dramatic lighting, wearing {outfit}, contemporary C-suite portrait, confident expression",
        outfit="a dark suit",
        outfit_female="a dark tailored pantsuit",
    ),
    HeadshotStyle(
        id="tech-startup",
        name="Tech Startup",
        category="tech",
        template="Transform this into a tech startup headshot. Clean minimal background, bright modern lighting, wearing {outfit}, Silicon Valley style, innovative and approachable",
        outfit="a casual hoodie or t-shirt",
    ),
    HeadshotStyle(
        id="tech-professional",
        name="Tech Professional",
        category="tech",
        template="Transform this into a tech professional headshot. Simple gray background, clean lighting, wearing {outfit}, modern tech industry style",
        outfit="a casual button-up shirt",
    ),
    HeadshotStyle(
        id="healthcare-professional",
        name="Healthcare Professional",
        category="industry",
        template="Transform this into a healthcare professional headshot. Clean white background, bright even lighting, wearing {outfit}, trustworthy and caring expression, medical professional style",
        outfit="a clean white medical coat over professional attire",
    ),
    HeadshotStyle(
        id="academic",
        name="Academic Professional",
        category="industry",
        template="Transform this into an academic professional headshot. Library or office background with soft bokeh, warm lighting, wearing {outfit}, scholarly and approachable",
        outfit="a tweed blazer over a button-up shirt",
    ),
    HeadshotStyle(
        id="sales-professional",
        name="Sales Professional",
        category="industry",
        template="Transform this into a sales professional headshot. Clean bright background, confident lighting, wearing {outfit}, warm smile, trustworthy and personable",
        outfit="professional business attire",
    ),
    HeadshotStyle(
        id="finance-professional",
        name="Finance Professional",
        category="industry",
        template="Transform this into a finance professional headshot. Conservative gray background, professional lighting, wearing {outfit}, confident and trustworthy expression",
        outfit="a formal pinstripe suit with silk tie",
        outfit_female="a formal pinstripe suit with a silk camisole",
    ),
    HeadshotStyle(
        id="legal-professional",
        name="Legal Professional",
        category="industry",
        template="Transform this into a legal professional headshot. Traditional office background, formal lighting, wearing {outfit}, authoritative and professional demeanor",
        outfit="a traditional dark suit with conservative tie",
        outfit_female="a traditional dark suit with a tailored blouse",
    ),
    HeadshotStyle(
        id="consultant",
        name="Consultant",
        category="industry",
        template="Transform this into a consultant headshot. Modern office background, professional lighting, wearing {outfit}, confident and knowledgeable expression",
        outfit="business professional attire",
    ),
)

_STYLES_BY_ID = {style.id: style for style in HEADSHOT_STYLES}

PREMIUM_PROMPT_SUFFIX = ", ultra high quality, 8K resolution, extremely detailed"

TUNE_PROMPTS: tuple[str, ...] = (
    # Corporate
    "professional headshot of person, wearing navy blue suit, clean white background, soft studio lighting, LinkedIn profile photo, high resolution, sharp focus, professional photography",
    "corporate portrait of person, wearing charcoal gray blazer with white shirt, neutral gray background, professional lighting, business photo, confident expression",
    "executive headshot of person, wearing black suit with white shirt, gradient gray background, studio lighting, CEO portrait style, authoritative yet approachable",
    "professional headshot of person, wearing dark blue business attire, soft white background, natural window lighting, corporate style, warm smile",
    # Business casual
    "professional headshot of person, wearing light blue button-up shirt, white background, natural soft lighting, friendly approachable expression, modern professional",
    "business casual portrait of person, wearing navy sweater over collared shirt, soft gray background, warm lighting, relaxed professional look",
    "modern professional headshot of person, wearing casual blazer with open collar, minimalist background, natural lighting, tech industry style",
    "contemporary headshot of person, wearing smart casual attire, blurred office background, soft lighting, startup professional vibe",
    # Creative
    "artistic professional headshot of person, wearing black turtleneck, minimalist white background, dramatic studio lighting, creative industry style",
    "modern creative portrait of person, wearing dark casual attire, colorful blurred background bokeh, natural light, designer aesthetic",
    "stylish professional headshot of person, wearing contemporary fashion, clean geometric background, editorial lighting, fashion forward",
    # Outdoor
    "professional outdoor headshot of person, natural greenery background with soft bokeh, golden hour lighting, warm natural tones, approachable executive",
    "natural light portrait of person, blurred outdoor background, soft diffused sunlight, professional yet relaxed, lifestyle headshot",
    "environmental portrait of person, architectural background blurred, natural lighting, urban professional style, confident pose",
    # Industry
    "real estate agent headshot of person, wearing professional blazer, bright friendly smile, clean background, trustworthy appearance, high resolution",
    "healthcare professional portrait of person, wearing white coat or professional attire, clean background, compassionate expression, medical industry style",
    "tech professional headshot of person, modern casual attire, minimal background, natural lighting, Silicon Valley aesthetic",
    "consultant headshot of person, wearing professional suit, confident expression, neutral background, advisory presence",
    # Expression
    "professional headshot of person, confident subtle smile, professional attire, clean background, approachable yet authoritative",
    "corporate portrait of person, neutral professional expression, business attire, studio lighting, executive presence",
    "friendly professional headshot of person, warm genuine smile, business casual, soft lighting, personable and trustworthy",
)

_TUNE_PROMPT_VARIATIONS = (
    "",
    ", slightly different angle",
    ", alternative lighting",
    ", subtle expression variation",
)


def get_style(style_id: str) -> HeadshotStyle | None:
    """Look up a style by id."""
    return _STYLES_BY_ID.get(style_id)


def styles_for_tier(tier: PricingTier) -> list[HeadshotStyle]:
    """Return the default styles for a tier, one per purchased headshot."""
    return list(HEADSHOT_STYLES[: tier.headshots])


def prompts_needed(image_count: int, images_per_prompt: int) -> int:
    """Number of tune prompts required to yield at least ``image_count`` images."""
    return math.ceil(image_count / images_per_prompt)


def build_tune_prompts(count: int) -> list[str]:
    """Build ``count`` tune prompts, cycling the base list with variations."""
    prompts: list[str] = []
    while len(prompts) < count:
        base = TUNE_PROMPTS[len(prompts) % len(TUNE_PROMPTS)]
        variation = _TUNE_PROMPT_VARIATIONS[
            (len(prompts) // len(TUNE_PROMPTS)) % len(_TUNE_PROMPT_VARIATIONS)
        ]
        prompts.append(base + variation)
    return prompts
