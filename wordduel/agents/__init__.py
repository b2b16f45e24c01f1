"""Judge, opponent and hint agents for wordduel."""
from wordduel.agents.hints import HintAdvisor, LadderHintAdvisor, LLMHintAdvisor
from wordduel.agents.judge import JUDGE_LABELS, Judge, KeywordJudge, LLMJudge, normalize_label
from wordduel.agents.opponent import LLMOpponent, Opponent, ScriptedOpponent, is_guess

__all__ = [
    "HintAdvisor",
    "JUDGE_LABELS",
    "Judge",
    "KeywordJudge",
    "LadderHintAdvisor",
    "LLMHintAdvisor",
    "LLMJudge",
    "LLMOpponent",
    "Opponent",
    "ScriptedOpponent",
    "is_guess",
    "normalize_label",
]
