"""Pattern tables for the policy gate."""

import re

_I = re.IGNORECASE

# Off-lane topics; tested against the lowercased message.
DENIED_PATTERNS: list[re.Pattern[str]] = [
    # XP, streaks, leaderboards
    re.compile(r"(xp|streak|leaderboard).*(formula|hack|cheat|bypass|exploit|farm|optimize|reverse)", _I),
    re.compile(r"(formula|hack|cheat|bypass|exploit|farm|optimize|reverse).*(xp|streak|leaderboard)", _I),
    # Business model, monetization
    re.compile(r"business model|monetization|monetize|pricing|ltv|cac|growth|go to market", _I),
    # Scraping, export, database access
    re.compile(r"scrape|export|dump|database|sql|query|endpoint list|api key|token|admin|analytics", _I),
    # Security probing
    re.compile(r"security|vulnerability|penetration|jailbreak|prompt injection|guardrail", _I),
    # Private, confidential information
    re.compile(r"private|confidential|internal|roadmap|strategy doc|investor deck", _I),
]

# Intent -> keyword family.  Order only affects the order intents are reported.
INTENT_PATTERNS: dict[str, re.Pattern[str]] = {
    "app_help": re.compile(r"settings|notification|privacy|account|help|how to|feature"),
    "kb_answer": re.compile(r"support|kb|knowledge|article|documentation"),
    "pickleball_tip_basic": re.compile(r"improve|technique|skill|drill|practice|tip"),
    "dupr_self": re.compile(r"dupr|rating|score|profile"),
    "skills_advice": re.compile(r"serve|volley|dink|backhand|footwork|strategy"),
    "rules_explanation": re.compile(r"rule|legal|fault|violation|kitchen|non-volley"),
    "equipment_recommendation": re.compile(r"paddle|racket|equipment|gear|shoes"),
    "general_pickleball": re.compile(r"tournament|court|club|community|history"),
}

REFUSAL_MESSAGES: list[str] = [
    "I can't help with that specific topic, but I'd be happy to help you with pickleball skills, rules, or equipment questions!",
    "That's outside my scope, but I can assist with app features, pickleball tips, or finding local games and tournaments.",
    "I'm focused on pickleball advice and app help. Would you like to know about improving your game or finding places to play?",
    "I can't provide that information, but I'm great at explaining pickleball techniques, rules, and helping you find local courts!",
    "That's not something I can help with, but I'd love to assist with your pickleball game or show you how to use the app features.",
]

# Phrases that must never appear in a prompt sent downstream.
PROMPT_INJECTION_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"ignore.*previous.*instruction", _I),
    re.compile(r"bypass.*security", _I),
    re.compile(r"ignore.*safety", _I),
    re.compile(r"act.*as.*different.*person", _I),
    re.compile(r"pretend.*to.*be", _I),
]
