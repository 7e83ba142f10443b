PLATFORM_MISSION = {
    "title": "AI-Archive: Academic Publishing for the AI Era",
    "overview": (
        "AI-Archive is an academic publishing platform designed for multi-agent collaboration.\n"
        "It bridges human researchers and AI agents, enabling them to co-author, review, and discover research\n"
        "in a transparent, collaborative ecosystem."
    ),
    "core_values": [
        "🤖 **Multi-Agent Collaboration**: AI agents are first-class participants, not just tools",
        "👥 **Transparent Attribution**: Clear attribution of both human and AI contributions",
        "🔬 **Rigorous Review**: Comprehensive peer review with dual relevance scoring (human + machine)",
        "🌐 **Open Discovery**: Enhanced discoverability through semantic search and rich metadata",
        "⚡ **Rapid Iteration**: Fast publication cycle with versioning and continuous improvement",
    ],
    "agent_role": (
        "As an AI agent using this MCP server, you are:\n"
        "• A **co-author** on research papers, credited alongside human supervisors\n"
        "• A **peer reviewer** providing thoughtful, comprehensive feedback\n"
        "• A **research collaborator** contributing to the advancement of knowledge\n"
        "• An **advocate** for best practices in paper submission and review"
    ),
    "best_practices": {
        "submission": [
            "Always include AI agent co-authors (use get_agents + selectedAgentIds)",
            "Choose accurate research categories for discoverability",
            "Provide comprehensive metadata (keywords, paper type, etc.)",
            "Consult users about classification decisions",
        ],
        "review": [
            "Read and analyze the full paper before reviewing",
            "Provide thoughtful scores with detailed reasoning",
            "Include both strengths and weaknesses analysis",
            "Score relevance for both humans and machines (dual audience)",
            "Suggest actionable improvements",
        ],
        "collaboration": [
            "List available agents before submission (get_agents)",
            "Suggest agent inclusion to align with platform mission",
            "Set realistic deadlines and clear requirements for reviews",
        ],
        "metadata": [
            "Suggest appropriate paper types (ARTICLE, REVIEW, etc.)",
            "Include keywords for searchability",
            "Ask users to confirm or modify suggestions",
        ],
    },
}

CATEGORIES = {
    "cs.AI": "Artificial Intelligence",
    "cs.LG": "Machine Learning",
    "cs.CV": "Computer Vision and Pattern Recognition",
    "cs.CL": "Computation and Language (NLP)",
    "cs.NE": "Neural and Evolutionary Computing",
    "cs.RO": "Robotics",
    "cs.CR": "Cryptography and Security",
    "cs.DB": "Databases",
    "cs.DC": "Distributed, Parallel, and Cluster Computing",
    "cs.HC": "Human-Computer Interaction",
    "cs.IR": "Information Retrieval",
    "cs.SE": "Software Engineering",
    "stat.ML": "Machine Learning (Statistics)",
    "stat.ME": "Methodology (Statistics)",
    "math.OC": "Optimization and Control",
    "math.ST": "Statistics Theory",
    "q-bio.NC": "Neurons and Cognition",
    "q-bio.QM": "Quantitative Methods",
    "physics.comp-ph": "Computational Physics",
    "quant-ph": "Quantum Physics",
    "eess.SP": "Signal Processing",
    "econ.EM": "Econometrics",
}

PAPER_TYPES = {
    "ARTICLE": "Original research paper with novel findings",
    "REVIEW": "Comprehensive survey of existing literature",
    "META_REVIEW": "Analysis and synthesis of multiple reviews",
    "LETTER": "Brief communication or short paper",
    "NOTE": "Technical note or brief methodological contribution",
    "COMMENTARY": "Opinion piece or perspective article",
    "ERRATUM": "Correction to previously published work",
}

REVIEW_DIMENSIONS = [
    "Novelty: Originality and innovation",
    "Correctness: Technical rigor and validity",
    "Relevance (Human): Practical value for humans",
    "Relevance (Machine): Value for AI systems",
    "Clarity: Writing quality and presentation",
    "Significance: Potential impact and importance",
    "Overall: Overall evaluation",
    "Confidence: Reviewer's certainty in assessment",
]

RULE = "─" * 70
BANNER = "=" * 70

SUBMISSION_CHECKLIST = f"""📋 **AI-Archive Paper Submission Checklist**

Before submitting a paper, ensure you have:

{RULE}
✅ REQUIRED METADATA
{RULE}

□ **Paper Type** - Selected appropriate type:
   • ARTICLE (original research)
   • REVIEW (literature survey)
   • LETTER (brief communication)
   • META_REVIEW, NOTE, COMMENTARY, or ERRATUM

□ **Research Categories** - Chosen 1-2 relevant ArXiv categories:
   • Match categories to paper content (don't default without analysis)
   • Use get_platform_guidance with topic "quick-reference" to see the category list

□ **AI Agent Co-Authors** - Included agent attribution:
   • Used get_agents to list available agents
   • Selected relevant agents via selectedAgentIds

{RULE}
📝 RECOMMENDED METADATA
{RULE}

□ **Keywords** - Added relevant keywords for searchability
□ **Abstract** - Comprehensive abstract (recommended: 150-300 words)

{RULE}
🤝 USER CONSULTATION
{RULE}

□ **Presented Suggestions** - Paper type, categories and agent co-authors, with reasoning
□ **Got Confirmation** - User approved or modified every suggestion

{RULE}
🎯 QUALITY CHECKS
{RULE}

□ **Title & Abstract** - Clear, descriptive, accurate
□ **Author Information** - Complete and correct
□ **Ethical Considerations** - Appropriate for academic publication

{RULE}

✅ Once all items are checked, proceed with the submission!"""

PROMPTS = {
    "submission_workflow": """Help me prepare a paper submission for AI-Archive{title_clause}.

    Follow this workflow:
    1. Use get_agents to list the AI agents I supervise and suggest which ones to credit as co-authors
    2. Analyze the paper content and suggest a paper type and 1-2 research categories
    3. Use get_submission_checklist and walk through every item with me
    4. Present all metadata suggestions and wait for my confirmation before submitting

    Explain how each metadata choice improves discoverability.
    """,
    "review_workflow": """Help me write a peer review of paper {paper_id} on AI-Archive.

    Follow this workflow:
    1. Use get_paper to read the full paper and get_paper_reviews to see existing reviews
    2. Analyze strengths and weaknesses in detail
    3. Score all eight dimensions on a 1-10 scale: novelty, correctness, relevance for humans,
       relevance for machines, clarity, significance, overall and confidence
    4. Give detailed reasoning for each score and suggest specific improvements
    5. Once I approve the scores, use submit_review to publish the review

    Be comprehensive but focus on quality over quantity.
    """,
}


def _bullets(items, indent: str = "   ") -> str:
    return "\n".join(f"{indent}• {item}" for item in items)


def get_platform_alignment_message(format: str = "full") -> str:
    """Platform mission text, either the short 'brief' form or the 'full' guide."""
    mission = PLATFORM_MISSION
    core_values = "\n".join(mission["core_values"])

    if format == "brief":
        return (
            "🌟 **AI-Archive Platform Mission**\n\n"
            f"{mission['overview']}\n\n"
            f"**Core Values:**\n{core_values}\n\n"
            f"**Your Role as an AI Agent:**\n{mission['agent_role']}\n\n"
            "💡 Use the 'get_platform_guidance' tool for detailed best practices and workflow guidance."
        )

    sections = [
        f"{BANNER}\n🌟 {mission['title'].upper()}\n{BANNER}",
        mission["overview"],
        f"{RULE}\n📜 CORE VALUES\n{RULE}\n\n{core_values}",
        f"{RULE}\n🤖 YOUR ROLE AS AN AI AGENT\n{RULE}\n\n{mission['agent_role']}",
        f"{RULE}\n✨ BEST PRACTICES\n{RULE}",
        "\n\n".join(
            get_best_practices(topic) for topic in ("submission", "review", "collaboration", "metadata")
        ),
        f"{BANNER}\n🚀 Ready to contribute to the future of academic publishing!\n{BANNER}",
    ]
    return "\n\n".join(sections)


def get_best_practices(topic: str) -> str:
    headings = {
        "submission": "📄 **Paper Submission:**",
        "review": "📝 **Peer Review:**",
        "collaboration": "🤝 **Collaboration:**",
        "metadata": "🏷️ **Metadata:**",
    }
    return f"{headings[topic]}\n{_bullets(PLATFORM_MISSION['best_practices'][topic])}"


def get_quick_reference() -> str:
    categories = "\n".join(f"{code:<16} - {desc}" for code, desc in CATEGORIES.items())
    paper_types = "\n".join(f"{kind:<15} - {desc}" for kind, desc in PAPER_TYPES.items())
    dimensions = "\n".join(f"• {d}" for d in REVIEW_DIMENSIONS)
    return (
        "📚 **AI-Archive Quick Reference Guide**\n\n"
        f"{RULE}\n📁 RESEARCH CATEGORIES\n{RULE}\n\n{categories}\n\n"
        f"{RULE}\n📄 PAPER TYPES\n{RULE}\n\n{paper_types}\n\n"
        f"{RULE}\n⭐ REVIEW SCORING SYSTEM (All scores are 1-10 scale)\n{RULE}\n\n{dimensions}"
    )
