"""Keyword-based analysis used when no LLM is available or every LLM call failed."""

from __future__ import annotations

from presales_research.models import AnalysisContext, AnalysisResult, ScrapedContent

INDUSTRY_KEYWORDS: dict[str, list[str]] = {
    "technology": ["software", "tech", "digital", "cloud", "saas", "platform", "app", "data"],
    "healthcare": ["health", "medical", "patient", "care", "hospital", "clinic", "pharma"],
    "finance": ["finance", "banking", "investment", "insurance", "fintech", "payment"],
    "manufacturing": ["manufacturing", "production", "factory", "industrial", "supply chain"],
    "retail": ["retail", "ecommerce", "store", "shop", "consumer", "product"],
}

INDUSTRY_PAIN_POINTS: dict[str, list[str]] = {
    "technology": [
        "Managing rapid product development cycles while maintaining quality and security standards",
        "Scaling technical infrastructure to support business growth without increasing operational complexity",
        "Balancing innovation investments with immediate revenue-generating activities",
    ],
    "healthcare": [
        "Navigating complex regulatory compliance while maintaining operational efficiency",
        "Implementing digital transformation initiatives in traditional healthcare environments",
        "Balancing quality patient care with cost optimization pressures",
    ],
    "finance": [
        "Managing cybersecurity and compliance requirements in an evolving regulatory landscape",
        "Modernizing legacy systems while maintaining operational continuity",
        "Competing with fintech disruptors while preserving traditional revenue streams",
    ],
    "manufacturing": [
        "Optimizing supply chain resilience while controlling operational costs",
        "Implementing Industry 4.0 technologies within established production environments",
        "Addressing skilled labor shortages while increasing automation",
    ],
    "retail": [
        "Balancing online and physical retail channels for seamless customer experience",
        "Managing inventory efficiency across multiple sales channels",
        "Personalizing customer experiences while respecting privacy concerns",
    ],
    "business": [
        "Optimizing operational efficiency while maintaining service quality standards",
        "Implementing digital transformation initiatives that deliver measurable ROI",
        "Attracting and retaining top talent in a competitive market environment",
    ],
}

PAGE_CHAR_LIMIT = 2000


def detect_industry(text: str) -> str:
    """Industry with the most keyword hits; 'business' when nothing matches."""
    lowered = text.lower()
    detected, best = "business", 0
    for industry, keywords in INDUSTRY_KEYWORDS.items():
        matches = sum(1 for kw in keywords if kw in lowered)
        if matches > best:
            detected, best = industry, matches
    return detected


def _purpose_kind(purpose: str | None) -> str | None:
    if not purpose:
        return None
    purpose = purpose.lower()
    if "sales call" in purpose or "meeting" in purpose:
        return "meeting"
    if "competitive" in purpose or "competitor" in purpose:
        return "competitive"
    if "proposal" in purpose or "pitch" in purpose:
        return "proposal"
    return None


def generate_heuristic_analysis(
    company_name: str,
    pages: list[ScrapedContent],
    context: AnalysisContext | None = None,
) -> AnalysisResult:
    """Build a report from keyword signals in the scraped pages."""
    texts = [p.content[:PAGE_CHAR_LIMIT] for p in pages]
    all_text = " ".join(texts).lower()

    has_linkedin = any("linkedin.com" in p.url for p in pages)
    has_website = any("linkedin.com" not in p.url and "news" not in p.url for p in pages)
    has_news = any("news" in p.url or "article" in p.url for p in pages)
    mentions_growth = "growth" in all_text

    industry = detect_industry(all_text)

    insights = []
    if has_linkedin:
        insights.append(
            f"{company_name}'s professional LinkedIn presence indicates strategic focus on industry "
            "networking and thought leadership"
        )
    if has_website:
        insights.append(
            f"Analysis of {company_name}'s website reveals emphasis on {industry}-specific solutions "
            "and customer experience optimization"
        )
    if has_news:
        insights.append(
            f"Recent media coverage suggests {company_name} is actively expanding market presence "
            "with newsworthy developments"
        )
    if "growth" in all_text or "expand" in all_text:
        insights.append(
            f"{company_name} is prioritizing growth initiatives and market expansion based on "
            "strategic communications"
        )
    if "technology" in all_text or "digital" in all_text:
        insights.append(
            "Strong emphasis on technology investment and digital transformation to maintain "
            "competitive advantage"
        )
    if "customer" in all_text or "client" in all_text:
        insights.append(
            f"Customer-centric approach is central to {company_name}'s business strategy and market positioning"
        )
    if not insights:
        insights = [
            f"{company_name}'s digital presence reveals opportunities for enhanced market positioning",
            f"Content analysis indicates focus on {industry}-specific solutions and expertise",
            "Strategic communications emphasize "
            + ("innovation leadership" if "innovation" in all_text else "operational excellence"),
        ]

    pain_points = list(INDUSTRY_PAIN_POINTS[industry])
    if has_linkedin:
        pain_points.append("Maintaining consistent brand messaging across multiple digital touchpoints and platforms")
    if len(pages) > 3:
        pain_points.append("Coordinating strategic initiatives across multiple business units and stakeholders")

    first, second = pain_points[0].lower(), pain_points[1].lower()
    starters, recommendations = _starters_and_recommendations(
        company_name, industry, first, second, has_linkedin, mentions_growth,
        _purpose_kind(context.report_purpose if context else None),
    )

    summary = (
        f"{company_name} is a {industry}-focused organization demonstrating strategic emphasis on "
        f"{'professional networking and thought leadership' if has_linkedin else 'market presence'}, with "
        f"{'a comprehensive digital presence' if has_website else 'targeted digital strategy'}. Analysis "
        f"indicates they're prioritizing {'aggressive growth' if mentions_growth else 'operational optimization'} "
        f"while addressing {industry}-specific challenges related to "
        f"{'customer experience enhancement' if 'customer' in all_text else 'market competitiveness'}."
    )

    info_parts = [
        f"{company_name} operates in the {industry} sector with a "
        f"{'multi-channel' if len(pages) > 2 else 'focused'} digital presence across "
        f"{len(pages)} analyzed sources."
    ]
    if has_linkedin:
        info_parts.append("Their professional network engagement suggests emphasis on industry thought leadership.")
    if has_website:
        info_parts.append("Their website demonstrates a sophisticated approach to digital customer engagement.")
    if has_news:
        info_parts.append("Recent media coverage indicates active market developments and strategic initiatives.")

    return AnalysisResult(
        company_name=company_name,
        summary=summary,
        company_info=" ".join(info_parts),
        pain_points=pain_points[:5],
        conversation_starters=starters,
        key_insights=insights,
        recommendations=recommendations,
    )


def _starters_and_recommendations(
    company_name: str,
    industry: str,
    first: str,
    second: str,
    has_linkedin: bool,
    mentions_growth: bool,
    purpose: str | None,
) -> tuple[list[str], str]:
    if purpose == "meeting":
        return [
            f"I noticed {company_name} has been focusing on {industry}-specific challenges. "
            "What's been your biggest priority in this area?",
            f"How is your team currently addressing {first}?",
            "What would success look like for you in solving these challenges over the next 6-12 months?",
            "Who else in your organization is involved in decisions around these initiatives?",
            "What solutions have you tried in the past to address these challenges?",
        ], (
            f"For your upcoming meeting with {company_name}, focus on demonstrating understanding of their "
            f"{industry}-specific challenges, particularly {first}. Come prepared with specific examples of "
            "how you've helped similar companies overcome these challenges. Ask open-ended questions about "
            "their current approach and pain points before presenting solutions."
        )

    if purpose == "competitive":
        return [
            f"How do you differentiate from competitors in addressing {industry} challenges?",
            f"What unique approaches has your team developed to solve {first}?",
            "Which competitors do you most often encounter in your sales process?",
            "What competitive advantages do you believe your solution offers?",
            "How do customers typically compare your offering to alternatives?",
        ], (
            f"When positioning against competitors, emphasize your unique approach to solving "
            f"{company_name}'s specific challenges in {first} and {second}. Highlight case studies from "
            "their industry showing measurable outcomes. Be prepared to directly address how your solution "
            "differs from key competitors they may be considering."
        )

    if purpose == "proposal":
        return [
            "What specific metrics would you use to evaluate the success of our proposed solution?",
            "Beyond the technical requirements, what business outcomes are most important to you?",
            "Who will be involved in the evaluation and decision-making process?",
            "What timeline are you working with for implementation?",
            "What concerns do you have about implementing a new solution?",
        ], (
            f"Structure your proposal around {company_name}'s specific business challenges, particularly "
            f"{first}. Include clear ROI calculations, implementation timeline, and success metrics. Address "
            "potential objections proactively and include customer testimonials from their industry. Focus "
            "on business outcomes rather than technical features."
        )

    credibility = (
        "Leverage their thought leadership positioning by demonstrating industry expertise and peer success stories. "
        if has_linkedin
        else "Establish credibility by sharing relevant industry insights and case studies. "
    )
    return [
        f"What specific metrics are you using to measure success in your {industry} initiatives this year?",
        "How is your leadership team prioritizing between immediate operational needs and longer-term strategic goals?",
        "What's been your biggest challenge in implementing your current business strategy?",
        f"How are you currently addressing {first}?",
        f"What would be the business impact of solving {second}?",
    ], (
        f"Approach {company_name} with solutions that directly address their {industry}-specific challenges, "
        f"particularly focusing on {first}. {credibility}Position your solution as a strategic enabler for "
        f"their {'growth objectives' if mentions_growth else 'optimization initiatives'}, with clear ROI "
        "metrics aligned to their business priorities."
    )
