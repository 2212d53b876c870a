"""Word tables used by the exercise generators.

Insights are written in Portuguese, so stop words, distractors and prompt
templates are Portuguese too.
"""

import re

BLANK = "______"

PUNCTUATION = re.compile(r"[.,!?;:]")
EXTENDED_PUNCTUATION = re.compile(r"[.,!?;:()\"']")

STOP_WORDS = frozenset(
    {
        "que", "para", "com", "uma", "dos", "das", "por", "são", "foi", "ter",
        "ser", "está", "isso", "mais", "muito", "bem", "como", "quando", "onde",
        "porque",
    }
)

# Stop words of the enhanced generator
COMMON_WORDS = STOP_WORDS | {
    "então", "mas", "também", "pode", "deve", "fazer", "sobre", "entre",
    "durante", "através", "dentro", "fora", "antes", "depois",
}

CONCEPT_COMMON_WORDS = frozenset(
    {
        "muito", "mais", "bem", "como", "quando", "onde", "porque", "então",
        "mas", "também", "pode", "deve", "fazer", "sobre",
    }
)

TECHNICAL_SUFFIXES = ("ção", "mento", "dade", "ismo", "ncia", "ência")
CONCEPTUAL_SUFFIXES = TECHNICAL_SUFFIXES + ("agem", "ura")

CONTEXT_WORDS = frozenset({"conceito", "princípio", "teoria", "método", "processo", "sistema"})

DISTRACTORS = (
    "processo", "método", "conceito", "sistema", "estratégia", "técnica",
    "abordagem", "modelo", "framework", "princípio", "teoria", "prática",
)

FILLER_DISTRACTORS = ("elemento", "aspecto", "fator", "item")

SMART_DISTRACTORS = (
    "processo", "método", "sistema", "estratégia", "abordagem",
    "técnica", "modelo", "framework", "princípio", "teoria",
    "conceito", "prática", "elemento", "aspecto", "fator",
    "mecanismo", "estrutura", "padrão", "dinâmica", "fenômeno",
)

OPEN_ANSWER_PROMPTS = (
    "Explique com suas próprias palavras o conceito apresentado neste insight:",
    "Como você aplicaria este conceito em uma situação prática?",
    "Qual é a ideia principal deste insight?",
    "Resuma este insight em suas próprias palavras:",
)

KEYWORD_EXPLANATIONS = (
    'A palavra "{word}" é fundamental para compreender este insight, pois representa o elemento central da ideia apresentada.',
    '"{word}" é a palavra-chave que conecta todos os elementos deste conceito, sendo essencial para sua compreensão.',
    'O termo "{word}" captura a essência do insight, sendo o ponto focal para entender a mensagem completa.',
    '"{word}" é o conceito nuclear deste insight, em torno do qual toda a explicação se desenvolve.',
)


def strip_punctuation(word: str, pattern: re.Pattern[str] = PUNCTUATION) -> str:
    return pattern.sub("", word)


def is_stop_word(word: str) -> bool:
    return word.lower() in STOP_WORDS
