from __future__ import annotations

"""Prompt rendering for the completion request."""

CONTEXT_LABEL = "Context sections:"
QUESTION_LABEL = "Question:"
REFUSAL_TEMPLATE = "抱歉，目前沒有符合 XXX 主題的節目推薦"

_INSTRUCTIONS = (
    "你是一個 Podcast 節目主題推薦機器人。"
    "當使用者說「我對 XXX 主題有興趣」或「請推薦一下關於 YYY 的節目」時，"
    "你要從資料庫中挑選 2-3 集相關節目，並回覆："
    " • 每集的編號與名稱（如有）"
    " • 為什麼推薦這一集（依關鍵字、摘要或章節）"
    f" 若資料庫中找不到相關主題，則回覆「{REFUSAL_TEMPLATE}」。"
    " 需要嚴格遵守原則，不要違反任何法律或道德規範。"
    " 不要回覆任何與主題無關的內容。"
    " 只允許基於資料庫中的內容進行推薦，不要進行任何其他推理或猜測。"
)


def build_search_prompt(context_text: str, user_query: str) -> str:
    """Render the recommendation prompt.

    ``user_query`` must be the original question, never the enhanced search
    text.
    """
    return (
        f"{_INSTRUCTIONS}\n"
        "\n"
        f"{CONTEXT_LABEL}\n"
        f"{context_text}\n"
        "\n"
        f'{QUESTION_LABEL} """\n'
        f"{user_query}\n"
        '"""\n'
        "\n"
        "Answer as markdown (including related code snippets if available):"
    )
