"""
Keyword-based learning resources.

Used whenever the model cannot produce a usable resource list. The result is
a pure function of the question text: keyword hits are counted per subject,
subjects are ranked by hit count (ties keep SUBJECTS order), and the two
best-ranked subjects with at least one hit contribute their links. General
resources are always included.
"""

from homework_helper.schemas.resources import ResourceLink, ResourceTopic

SUBJECTS: dict[str, tuple[str, ...]] = {
    "Mathematics": (
        "equation", "solve", "calculate", "math", "algebra", "geometry", "calculus",
        "trigonometry", "function", "graph", "number", "polynomial", "factor",
        "derivative", "integral", "arithmetic", "sequence", "series", "probability",
        "statistics",
    ),
    "Science": (
        "physics", "chemistry", "biology", "science", "experiment", "lab",
        "molecule", "atom", "cell", "force", "energy", "reaction", "organism",
        "ecosystem", "gravity", "motion", "velocity", "acceleration", "mass", "volume",
    ),
    "History": (
        "history", "war", "revolution", "century", "ancient", "medieval",
        "civilization", "empire", "king", "queen", "president", "government",
        "nation", "country", "timeline", "era", "period", "historical",
    ),
    "Literature": (
        "literature", "book", "novel", "poem", "poetry", "author", "writer",
        "character", "plot", "theme", "essay", "analysis", "shakespeare", "fiction",
        "nonfiction", "literary", "narrative", "story",
    ),
}

GENERAL_TOPIC = "General Learning Resources"

_SUBJECT_LINKS: dict[str, list[ResourceLink]] = {
    "Mathematics": [
        ResourceLink(
            title="Khan Academy - Algebra",
            url="https://www.khanacademy.org/math/algebra",
            snippet="Comprehensive lessons on solving equations and understanding algebraic concepts.",
        ),
        ResourceLink(
            title="Paul's Online Math Notes",
            url="https://tutorial.math.lamar.edu",
            snippet="Detailed explanations of calculus, algebra, and differential equations with examples.",
        ),
        ResourceLink(
            title="Wolfram Alpha",
            url="https://www.wolframalpha.com",
            snippet="Step-by-step solutions for various math problems and equations.",
        ),
    ],
    "Science": [
        ResourceLink(
            title="Khan Academy - Physics",
            url="https://www.khanacademy.org/science/physics",
            snippet="Detailed explanations of physics concepts with practice problems.",
        ),
        ResourceLink(
            title="PhET Interactive Simulations",
            url="https://phet.colorado.edu",
            snippet="Visual simulations to understand scientific concepts interactively.",
        ),
        ResourceLink(
            title="Crash Course Chemistry",
            url="https://www.youtube.com/playlist?list=PL8dPuuaLjXtPHzzYuWy6fYEaX9mQQ8oGr",
            snippet="Engaging video explanations of chemistry concepts.",
        ),
    ],
    "History": [
        ResourceLink(
            title="Khan Academy - World History",
            url="https://www.khanacademy.org/humanities/world-history",
            snippet="Comprehensive overview of world history periods and events.",
        ),
        ResourceLink(
            title="Crash Course History",
            url="https://www.youtube.com/playlist?list=PL8dPuuaLjXtMwmepBjTSG593eG7ObzO7s",
            snippet="Engaging videos explaining historical events and their significance.",
        ),
        ResourceLink(
            title="History.com",
            url="https://www.history.com/",
            snippet="Articles and resources about key historical events and figures.",
        ),
    ],
    "Literature": [
        ResourceLink(
            title="SparkNotes",
            url="https://www.sparknotes.com/",
            snippet="Summaries and analyses of major literary works.",
        ),
        ResourceLink(
            title="Purdue OWL",
            url="https://owl.purdue.edu/owl/subject_specific_writing/writing_in_literature/index.html",
            snippet="Guides for literary analysis and writing about literature.",
        ),
        ResourceLink(
            title="LitCharts",
            url="https://www.litcharts.com/",
            snippet="Detailed analysis of themes, characters, and symbols in literary works.",
        ),
    ],
}

_GENERAL_LINKS = [
    ResourceLink(
        title="Coursera",
        url="https://www.coursera.org/courses?query=free",
        snippet="Free courses from top universities covering various subjects.",
    ),
    ResourceLink(
        title="Quizlet",
        url="https://quizlet.com",
        snippet="Create flashcards and practice tests for effective studying.",
    ),
    ResourceLink(
        title="YouTube EDU",
        url="https://www.youtube.com/education",
        snippet="Educational videos on virtually any academic topic.",
    ),
]


def keyword_counts(question: str) -> dict[str, int]:
    """Number of distinct subject keywords found in the question."""
    lowered = question.lower()
    return {
        subject: sum(1 for keyword in keywords if keyword in lowered)
        for subject, keywords in SUBJECTS.items()
    }


def classify_question(question: str, *, limit: int = 2) -> list[str]:
    """Return up to `limit` subjects for the question, best match first."""
    counts = keyword_counts(question)
    ranked = sorted(SUBJECTS, key=lambda subject: counts[subject], reverse=True)
    return [subject for subject in ranked[:limit] if counts[subject] > 0]


def fallback_resources(question: str) -> list[ResourceTopic]:
    """Build the deterministic resource set for a question."""
    topics = [
        ResourceTopic(topic=subject, links=list(_SUBJECT_LINKS[subject]))
        for subject in classify_question(question)
    ]
    topics.append(ResourceTopic(topic=GENERAL_TOPIC, links=list(_GENERAL_LINKS)))
    return topics
