from __future__ import annotations

from src.rag.prompt import CONTEXT_LABEL, QUESTION_LABEL, REFUSAL_TEMPLATE, build_search_prompt


def test_labels_appear_once_in_order() -> None:
    prompt = build_search_prompt("episode 5 covers marketing\n---\n", "第五集在講什麼")

    assert prompt.count(CONTEXT_LABEL) == 1
    assert prompt.count(QUESTION_LABEL) == 1
    assert prompt.index(CONTEXT_LABEL) < prompt.index(QUESTION_LABEL)


def test_question_block_holds_original_query() -> None:
    query = "第五集在講什麼"
    prompt = build_search_prompt("context", query)

    question_block = prompt.split(f'{QUESTION_LABEL} """\n', 1)[1].split('\n"""', 1)[0]
    assert question_block == query


def test_context_is_included_verbatim() -> None:
    context = "  section one\n---\nsection two\n---\n"
    prompt = build_search_prompt(context, "q")

    assert f"{CONTEXT_LABEL}\n{context}" in prompt


def test_prompt_is_deterministic() -> None:
    assert build_search_prompt("c", "q") == build_search_prompt("c", "q")


def test_static_instructions() -> None:
    prompt = build_search_prompt("c", "q")

    assert prompt.startswith("你是一個 Podcast 節目主題推薦機器人。")
    assert REFUSAL_TEMPLATE in prompt
    assert prompt.endswith("Answer as markdown (including related code snippets if available):")
