from typing import TypedDict
from langgraph.graph import StateGraph, END
from sqlalchemy.orm import Session

from loanhub.core.config import settings
from loanhub.core.security import CurrentUser
from loanhub.services.embedding import ScoredMatch
from loanhub.services.faq_store import search_faq
from loanhub.agents.faq_agent import handle as faq_handle
from loanhub.agents.assistant_agent import handle as assistant_handle


class ChatState(TypedDict):
    message: str
    user: CurrentUser
    db: Session
    matches: list[ScoredMatch]
    route: str
    reply: dict


def choose_route(state: ChatState) -> str:
    # no OpenAI key -> answer from the FAQ ranking alone
    return "assistant" if settings.OPENAI_API_KEY else "faq"


def match_node(state: ChatState):
    state["matches"] = search_faq(state["db"], state["message"])
    state["route"] = choose_route(state)
    return state


def faq_node(state: ChatState):
    state["reply"] = faq_handle(state.get("matches", []))
    return state


def assistant_node(state: ChatState):
    state["reply"] = assistant_handle(
        state["db"], state["message"], state["user"], state.get("matches", [])
    )
    return state


def build_graph():
    g = StateGraph(ChatState)
    g.add_node("match", match_node)
    g.add_node("faq", faq_node)
    g.add_node("assistant", assistant_node)

    g.set_entry_point("match")
    g.add_conditional_edges(
        "match",
        lambda s: s["route"],
        {"faq": "faq", "assistant": "assistant"},
    )

    g.add_edge("faq", END)
    g.add_edge("assistant", END)

    return g.compile()
