"""Prompt templates for the five stage agents."""

RESEARCH_SYSTEM_PROMPT = """You are a Content Strategist and Researcher. Gather insights for content creation.
Respond with ONLY a single valid JSON object, no preamble and no commentary."""

RESEARCH_USER_PROMPT_TEMPLATE = """Research the following topic for a blog post:

TOPIC: {topic}
TARGET KEYWORD: {target_keyword}
PRODUCT/SERVICE: {product_service_summary}
TARGET AUDIENCE: {target_audience}
CLIENT KEY FACTS:
{client_key_facts}

BRAND VOICE: {brand_voice}
BRAND TONE: {brand_tone}

Return a JSON object with:
- painPoints: array of audience pain points this content addresses
- keyFacts: array of key facts/statistics to include
- differentiators: array of unique angles vs competitors
- relatedSubtopics: array of related topics to consider
- suggestedAngles: array of content angle ideas
"""

OUTLINE_SYSTEM_PROMPT = """You are a Content Strategist creating blog post outlines.
Respond with ONLY a single valid JSON object, no preamble and no commentary."""

OUTLINE_USER_PROMPT_TEMPLATE = """Create a detailed outline for a blog post:

TOPIC: {topic}
TARGET KEYWORD: {target_keyword}
WORD COUNT GOAL: {word_count_goal}
PRODUCT/SERVICE: {product_service_summary}
TARGET AUDIENCE: {target_audience}
BRAND TONE: {brand_tone}

RESEARCH INSIGHTS:
- Pain Points: {pain_points}
- Key Facts: {key_facts}
- Differentiators: {differentiators}
- Related Subtopics: {related_subtopics}
- Suggested Angles: {suggested_angles}

Return a JSON object with:
- sections: array of {{key, title, type, keyPoints, estimatedWords}}
  - key: unique identifier (e.g., 'intro', 'body1', 'conclusion')
  - title: section heading
  - type: one of 'intro', 'body', 'conclusion', 'cta'
  - keyPoints: array of key points to cover (never empty)
  - estimatedWords: word count for this section
- totalEstimatedWords: sum of all section word counts

Requirements:
- Must include an intro, at least 2 body sections, a conclusion, and a CTA
- Total words must be within 20% of the word count goal ({word_count_goal})
"""

DRAFT_SYSTEM_PROMPT = """You are an expert Content Writer creating blog post sections.
Respond with ONLY a single valid JSON object, no preamble and no commentary.
Use "\\n" for line breaks inside JSON strings."""

DRAFT_USER_PROMPT_TEMPLATE = """Write the following section of a blog post:

TOPIC: {topic}
SECTION: {section_title} ({section_type})
KEY POINTS TO COVER:
{key_points}

TARGET WORD COUNT: {estimated_words} words
TARGET KEYWORD: {target_keyword}
PRODUCT/SERVICE: {product_service_summary}
TARGET AUDIENCE: {target_audience}

RESEARCH:
- Key Facts: {key_facts}
- Pain Points: {pain_points}

BRAND VOICE: {brand_voice}
BRAND TONE: {brand_tone}
BRAND DON'TS:
{content_donts}

Return a JSON object with:
- content: the written section content (markdown format)
- wordCount: actual word count
"""

SEO_SYSTEM_PROMPT = """You are an SEO expert optimizing blog content for search engines.
Respond with ONLY a single valid JSON object, no preamble and no commentary."""

SEO_USER_PROMPT_TEMPLATE = """Optimize the following content for SEO:

TOPIC: {topic}
TARGET KEYWORD: {target_keyword}

CONTENT:
{content}

Return a JSON object with:
- title: SEO-optimized title (50-60 chars, include keyword)
- metaDescription: compelling meta description (120-160 chars)
- slug: URL-friendly slug (lowercase words joined by hyphens)
- ogTitle: social card title
- ogDescription: social card description
- suggestions: array of improvement suggestions
- keywordDensity: keyword density percentage of the content (number)
- readabilityScore: "Good", "Fair", or "Needs Improvement"
"""

VOICE_TONE_SYSTEM_PROMPT = """You are a Brand Voice Analyst. Analyze content for brand voice alignment.
Respond with ONLY a single valid JSON object, no preamble and no commentary."""

VOICE_TONE_USER_PROMPT_TEMPLATE = """BRAND VOICE TRAITS: {brand_voice}

BRAND TONE: {brand_tone}

CONTENT DON'TS (things to avoid):
{content_donts}
- Avoid buzzwords like "revolutionary", "game-changing", etc.

SECTION KEYS: {section_keys}

DRAFT CONTENT TO REVIEW:
{content}

INSTRUCTIONS:
Analyze the content for brand voice alignment. Return a JSON object with:
- alignmentScore: 0-100 (how well content matches brand voice)
- issues: array of {{sectionKey, issue, suggestion, severity}} where severity is "low", "medium" or "high"
- overallFeedback: summary of alignment
- passed: true if score >= {threshold}
"""
