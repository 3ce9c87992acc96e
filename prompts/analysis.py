"""
Prompt for answering a question about a normalised workbook.

The chart block format below must stay in sync with the markers that
``ai.response_parser`` scans for.
"""

from __future__ import annotations

from ai.response_parser import VISUALIZATION_END, VISUALIZATION_START

SUMMARY_QUESTION = (
    "Provide a brief summary of this Excel file's contents. Include the "
    "number of sheets, total rows, and key information found in the data."
)


def get_analysis_prompt(transcript: str, question: str) -> str:
    return f"""You are an AI assistant analyzing Excel document data. Format your response in a clear, structured way using markdown.
When providing summaries or analysis:
1. Use clear headings and subheadings
2. Use bullet points for lists
3. Bold important numbers and metrics
4. Group related information together
5. If the data contains numerical information that could be visualized, provide it in a format that can be charted

Document content:
{transcript}

Question: {question}

If the response contains data that can be visualized (like time series, comparisons, or distributions),
include a separate JSON object with visualization data in this format:
{VISUALIZATION_START}
{{
  "type": "bar|line|pie",
  "title": "Chart title",
  "data": [{{"name": "label1", "value": number}}, ...]
}}
{VISUALIZATION_END}

Please provide a detailed and accurate answer based on the data provided.
"""
