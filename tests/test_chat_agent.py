import asyncio
import json

import pytest

from conftest import chat_agent_for, make_client
from legallens.agents.chat_agent import CHAT_FALLBACK_MESSAGE
from legallens.core.errors import ValidationError
from legallens.schemas.analysis import ChatRole, ChatTurn, ContractAnalysis

CONTEXT = {
    "summary": "Two-year SaaS subscription.",
    "risks": [{"clauseReference": "Clause 8", "riskLevel": "HIGH", "description": "x", "recommendation": "y"}],
    "obligations": [],
    "missing": ["Force Majeure"],
}


def test_answer_is_returned():
    client = make_client(text="  The notice period is 30 days.  ")
    agent = chat_agent_for(client)

    answer = asyncio.run(agent.ask([], "What is the notice period?", CONTEXT))

    assert answer == "The notice period is 30 days."


def test_request_carries_context_history_and_trailing_question():
    client = make_client(text="Sure.")
    agent = chat_agent_for(client)
    history = [
        ChatTurn(role=ChatRole.USER, text="Explain clause 8"),
        ChatTurn(role=ChatRole.MODEL, text="Clause 8 limits liability."),
    ]

    asyncio.run(agent.ask(history, "Rewrite clause 8", CONTEXT))

    call = client.aio.models.generate_content.await_args
    contents = call.kwargs["contents"]
    assert [c.role for c in contents] == ["user", "model", "user"]
    assert [c.parts[0].text for c in contents] == [
        "Explain clause 8",
        "Clause 8 limits liability.",
        "Rewrite clause 8",
    ]

    system = str(call.kwargs["config"].system_instruction)
    assert json.dumps(CONTEXT) in system
    assert "Plain English" in system
    assert "formal legal text" in system


def test_transport_failure_returns_fallback():
    agent = chat_agent_for(make_client(error=RuntimeError("503 Service Unavailable")))

    answer = asyncio.run(agent.ask([], "What are the payment terms?", CONTEXT))

    assert answer == CHAT_FALLBACK_MESSAGE


def test_empty_reply_returns_fallback():
    agent = chat_agent_for(make_client(text=""))

    assert asyncio.run(agent.ask([], "Anything else?", CONTEXT)) == CHAT_FALLBACK_MESSAGE


def test_empty_question_is_rejected():
    client = make_client(text="unused")
    agent = chat_agent_for(client)

    with pytest.raises(ValidationError):
        asyncio.run(agent.ask([], "  ", CONTEXT))
    client.aio.models.generate_content.assert_not_awaited()


def test_context_from_analysis_is_condensed(analysis_payload):
    analysis = ContractAnalysis.model_validate(analysis_payload)

    context = analysis.chat_context()

    assert set(context) == {"summary", "risks", "obligations", "missing"}
    assert context["missing"] == ["Force Majeure", "Data Processing Addendum"]
    assert context["risks"][0]["clauseReference"] == "Clause 4.2"
    assert "penalty" not in context["obligations"][0]
    json.dumps(context)
