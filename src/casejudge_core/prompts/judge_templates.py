"""
LLM-as-a-judge templates

Two variants share the JudgeReply schema: a basic scoring prompt and a
chain-of-thought prompt that embeds reference examples and a step-by-step
analysis scaffold.
"""

from __future__ import annotations

from casejudge_core.domain.constants import JUDGE_COT_TEMPLATE_ID, JUDGE_TEMPLATE_ID
from casejudge_core.domain.entities import FewShotExample, PromptTemplate
from casejudge_core.prompts.schemas import JudgeReply

JUDGE_OPERATION = "judge_evaluation"

_RESPONSE_FORMAT = """Respond with JSON only, using this structure:
{
  "scores": {
    "overall": <1-10>,
    "faithfulness": <1-10>,
    "completeness": <1-10>,
    "relevance": <1-10>,
    "clarity": <1-10>
  },
  "reasoning": {
    "overall": "<%(overall)s>",
    "faithfulness": "<%(dimension)s faithfulness score>",
    "completeness": "<%(dimension)s completeness score>",
    "relevance": "<%(dimension)s relevance score>",
    "clarity": "<%(dimension)s clarity score>"
  }
}
When additional criteria are listed, also add a "taskSpecific" object to both
"scores" and "reasoning", keyed by criterion name."""

JUDGE_BODY = """You are an expert AI evaluator. Your task is to evaluate the quality of an AI-generated response using specific criteria.

**Original Input:**
{{original_input}}

**AI Response to Evaluate:**
{{ai_response}}

**Evaluation Criteria:**
Please evaluate the AI response on the following dimensions using a scale of 1-10 (where 1 is very poor and 10 is excellent):

1. **Faithfulness** (1-10): How accurately does the response reflect the information in the input? Does it contain any hallucinations or factual errors?

2. **Completeness** (1-10): How thoroughly does the response address all aspects of the input? Are there any important points missing?

3. **Relevance** (1-10): How well does the response stay on topic and address the specific question or task?

4. **Clarity** (1-10): How clear, well-structured, and easy to understand is the response?

{{custom_criteria}}

**Instructions:**
- Provide scores for each criterion
- Give detailed reasoning for each score
- Be objective and consistent in your evaluation
- Consider the context and intended use case

""" + _RESPONSE_FORMAT % {
    "overall": "detailed explanation for overall score",
    "dimension": "detailed explanation for",
}

JUDGE_COT_BODY = """You are an expert AI evaluator. Your task is to evaluate the quality of an AI-generated response using structured scoring criteria with careful reasoning.

**Original Input:**
{{original_input}}

**AI Response to Evaluate:**
{{ai_response}}

{{few_shot_examples}}

**Step-by-Step Evaluation Process:**

1. **Initial Assessment**: What is the AI response trying to accomplish? What was requested in the original input?

2. **Content Analysis**: What specific information, claims, or recommendations does the AI response contain?

3. **Quality Evaluation**: Evaluate each dimension on a scale of 1-10:

**Faithfulness Analysis:**
- Are all facts and claims in the response accurate and supported by the input?
- Are there any hallucinations or unsupported statements?

**Completeness Analysis:**
- Does the response address all parts of the original request?
- Is the level of detail appropriate for the request?

**Relevance Analysis:**
- Does the response directly address the question or task?
- Are there any off-topic elements?

**Clarity Analysis:**
- Is the response well-structured and easy to follow?
- Is the language clear and appropriate for the audience?

{{custom_criteria}}

**Final Evaluation:**
""" + _RESPONSE_FORMAT % {
    "overall": "comprehensive explanation considering all factors",
    "dimension": "specific reasoning for",
}


def format_custom_criteria(criteria: dict[str, str] | None) -> str:
    """Render the additional-criteria section ("" when there are none)"""
    if not criteria:
        return ""
    lines = ["**Additional Criteria:**"]
    for index, (name, description) in enumerate(criteria.items(), start=5):
        lines.append(f"{index}. **{name}** (1-10): {description}")
    return "\n".join(lines)


def format_few_shot_examples(examples: list[FewShotExample] | None) -> str:
    """Render the reference-examples section ("" when there are none)"""
    if not examples:
        return ""
    blocks = [
        "**Reference Examples:**\nHere are some examples of how to evaluate similar responses:"
    ]
    for index, example in enumerate(examples, start=1):
        blocks.append(
            f"Example {index}:\n"
            f"Input: {example.input}\n"
            f"Output: {example.output}\n"
            f"Score: {example.score:g}/10\n"
            f"Reasoning: {example.reasoning}"
        )
    return "\n\n".join(blocks)


def judge_templates() -> list[PromptTemplate]:
    """Built-in judge templates"""
    return [
        PromptTemplate(
            id=JUDGE_TEMPLATE_ID,
            name="LLM-as-a-Judge Evaluation",
            version="1.0",
            operation=JUDGE_OPERATION,
            description="Evaluate AI output quality using structured scoring criteria",
            body=JUDGE_BODY,
            output_schema=JudgeReply,
            default_parameters={"temperature": 0.1, "max_tokens": 2000, "top_p": 0.9},
        ),
        PromptTemplate(
            id=JUDGE_COT_TEMPLATE_ID,
            name="LLM-as-a-Judge with Chain-of-Thought",
            version="1.0",
            operation=JUDGE_OPERATION,
            description="Evaluate AI output quality with chain-of-thought reasoning for bias mitigation",
            body=JUDGE_COT_BODY,
            output_schema=JudgeReply,
            default_parameters={"temperature": 0.1, "max_tokens": 3000, "top_p": 0.9},
        ),
    ]
