"""Sample agent responses covering each envelope phase.

Used by the CLI demo and the test suite. Each entry mirrors a shape real
agent frameworks produce: direct ``toolResults``, workflow output nested under
``result``, or step lists.
"""

SAMPLE_RESPONSES = {
    "clarification": {
        "description": "Agent asks a follow-up question",
        "response": {
            "text": "",
            "toolResults": [
                {
                    "toolName": "requestClarification",
                    "toolCallId": "call_clarify_1",
                    "result": {
                        "needsClarification": True,
                        "question": "What city is the outage affecting?",
                        "conversationTurn": 2,
                        "maxTurns": 5,
                    },
                }
            ],
            "usage": {"inputTokens": 412, "outputTokens": 38, "usd": 0.0004},
        },
    },
    "ticketDraft": {
        "description": "Issue extracted from a screenshot, not yet filed",
        "response": {
            "text": "Here is what I gathered so far.",
            "toolResults": [
                {
                    "toolName": "extractIssue",
                    "toolCallId": "call_extract_1",
                    "result": {
                        "ticket": {
                            "summary": "Checkout page times out",
                            "description": "Payment step hangs for 60s then shows a 504.",
                            "priority": "high",
                            "category": "technical",
                            "tags": ["checkout", "timeout"],
                            "metadata": {"confidence": 0.82, "extractedFrom": "image"},
                        }
                    },
                },
                {
                    "toolName": "analyzeTicket",
                    "toolCallId": "call_analyze_1",
                    "result": {
                        "analysis": {
                            "routing": {"recommendedTeam": "payments"},
                            "escalation": {"required": False},
                        }
                    },
                },
            ],
        },
    },
    "finalTicket": {
        "description": "Ticket filed by the creation tool",
        "response": {
            "text": "Your ticket is filed.",
            "toolResults": [
                {
                    "toolName": "createTicket",
                    "toolCallId": "call_create_1",
                    "result": {
                        "success": True,
                        "ticketId": "TICKET-1700000000000-ab12c",
                        "ticketData": {
                            "id": "TICKET-1700000000000-ab12c",
                            "summary": "Login broken for SSO users",
                            "description": "SSO users receive an invalid state error.",
                            "priority": "critical",
                            "category": "account",
                            "location": "Customer portal",
                            "status": "open",
                            "estimatedResolution": "2 hours",
                        },
                    },
                }
            ],
            "usage": {"inputTokens": 1290, "outputTokens": 211},
        },
    },
    "analysisOnly": {
        "description": "Workflow produced routing advice without a ticket",
        "response": {
            "result": {
                "toolResults": [
                    {
                        "id": "analyzeTicket",
                        "toolCallId": "call_analyze_2",
                        "result": {
                            "analysis": {
                                "routing": {"recommendedTeam": "billing"},
                                "escalation": {"required": True},
                                "sla": {"responseHours": 4},
                            }
                        },
                    }
                ]
            }
        },
    },
    "generic": {
        "description": "Plain conversational reply",
        "response": {"text": "Hello, how can I help?", "toolResults": []},
    },
}
