"""Prompt text handed to an external AI assistant.

Two prompts are produced:
    - Reading pattern analysis: the well-read history, asking the assistant
      to describe the reader's interests in the first person. The answer is
      meant to be saved as the reading profile.
    - Recommendation: the reading profile, the capacity estimate and the
      numbered candidate list, closing with output instructions that match
      the configured match mode.
"""

from models.article import CandidateArticle
from models.capacity import CapacityEstimate
from models.document import Document

SECTION = "===== {} ====="

DEFAULT_PROFILE = (
    "No saved reading profile is available. Infer my interests from the "
    "article list itself and favour practical, well-sourced pieces over "
    "announcements and press releases."
)

ANALYSIS_ASPECTS = [
    "Core Topics: What main subjects or fields do I consistently engage with?",
    "Technology Preferences: What technologies, programming languages, or tools am I interested in?",
    "Learning Patterns: Am I focused on practical tutorials, theoretical concepts, or both?",
    "Content Type Preferences: Based on the word count, what is the mix of short- vs. long-form content?",
    "Industry Focus: Which industries or sectors appear in my reading?",
    "Evolution of Interests: How have my interests changed over the period?",
    "Depth vs. Breadth: Do I deep-dive into specific topics or explore broadly?",
    "Content Sources: Are there specific websites or publications I read often?",
    "Topic Breakdown: Roughly what percentage of my reading falls under each core topic?",
]

_CLOSING_INSTRUCTIONS = {
    "title-quoted": (
        "End with a structured list of ONLY the recommended article TITLES, one per line, "
        "each enclosed in double quotes and written EXACTLY as in the list above:\n\n"
        '"Title of Article 1"\n"Title of Article 2"\n"Title of Article 3"\n\n'
        "Do not use double quotes anywhere else in your answer, and do not add numbers, "
        "bullets or other text around the titles in the final list."
    ),
    "title-line": (
        "Skip the explanation. Reply with ONLY the recommended article TITLES, one per line, "
        "written EXACTLY as in the list above, with no quotes, numbers, bullets, headings or "
        "other text. Every line of your reply will be treated as a title."
    ),
    "url": (
        "End with a structured list of ONLY the URLs of the recommended articles, one per "
        "line, copied EXACTLY from the list above. Do not shorten, rewrite or add "
        "parameters to the URLs, and do not include any other links in your answer."
    ),
}


def _history_entry(doc: Document) -> str:
    lines = [f'- "{doc.title or "Untitled"}"']
    if doc.url:
        lines.append(f"   URL: {doc.url}")
    if doc.last_moved_at:
        lines.append(f"   Date read: {doc.last_moved_at}")
    if doc.word_count:
        lines.append(f"   Word Count: {doc.word_count}")
    if doc.summary:
        lines.append(f"   Summary: {doc.summary}")
    return "\n".join(lines)


def build_reading_pattern_prompt(documents: list[Document], window_label: str = "6 months") -> str:
    """Prompt asking the assistant to analyze the reader's history.

    Args:
        documents: Well-read documents from the window
        window_label: Human-readable window, e.g. "6 months"
    """
    history = "\n\n".join(_history_entry(doc) for doc in documents)
    aspects = "\n".join(f"{i}. {aspect}" for i, aspect in enumerate(ANALYSIS_ASPECTS, 1))

    return "\n".join([
        f"Please analyze my reading patterns from the past {window_label} and provide "
        "insights about my interests and preferences.",
        "",
        SECTION.format(f"MY READING HISTORY (PAST {window_label.upper()})"),
        f"These are the {len(documents)} articles I read most of in the past {window_label}, "
        "indicating I found them valuable:",
        "",
        history,
        "",
        SECTION.format("ANALYSIS INSTRUCTIONS"),
        "Based on my reading history, provide a comprehensive analysis of my reading "
        "patterns and interests. Consider the following aspects:",
        "",
        aspects,
        "",
        "Organize the analysis into clearly labeled sections and support each observation "
        "with specific examples from my history.",
        "",
        "Your output will be reused in a later prompt that recommends articles to me, so "
        "write it in the first person.",
    ])


def build_recommendation_prompt(
    candidates: list[CandidateArticle],
    estimate: CapacityEstimate,
    mode: str = "title-quoted",
    reading_profile: str = "",
) -> str:
    """Prompt asking the assistant to pick articles for this week.

    Args:
        candidates: Articles extracted from the newsletters
        estimate: Capacity estimate that sets the target count
        mode: Match mode; selects the closing output instructions
        reading_profile: Free-text description of the reader's interests

    Raises:
        ValueError: If mode is unknown
    """
    if mode not in _CLOSING_INSTRUCTIONS:
        raise ValueError(f"Unknown match mode '{mode}'")

    articles = "\n\n".join(
        f'{i}. "{a.title}"\n   URL: {a.url}\n   Summary: {a.summary}'
        for i, a in enumerate(candidates, 1)
    )
    count = estimate.recommended_article_count

    return "\n".join([
        "I am going to give you a description of my reading preferences and a list of new "
        "articles from my newsletters. Recommend the subset I should save for reading this week.",
        "",
        SECTION.format("READING PATTERNS"),
        f"Based on my history, I read approximately {estimate.reading_capacity_per_day:.1f} "
        f"articles per day, but I typically save about {estimate.saving_capacity_per_day:.1f} "
        "articles per day (roughly 2x more than I thoroughly read).",
        f"So I'd like you to recommend about {count} articles that match my interests.",
        "",
        SECTION.format("MY READING PREFERENCES"),
        reading_profile.strip() or DEFAULT_PROFILE,
        "",
        SECTION.format("NEW NEWSLETTER ARTICLES"),
        articles,
        "",
        SECTION.format("RECOMMENDATION INSTRUCTIONS"),
        "1. Prioritize articles that align with my preferences.",
        f"2. Recommend approximately {count} articles (adjust if you think more or fewer "
        "would be appropriate).",
        "3. Unless told otherwise below, briefly explain why you recommend each article, "
        "grouped by theme if possible.",
        "",
        _CLOSING_INSTRUCTIONS[mode],
    ])
