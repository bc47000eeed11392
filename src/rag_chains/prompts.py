"""Prompt templates used by the retrieval QA chain.

Templates use ``str.format`` placeholders. ``{content}`` receives the
document or combined context text and ``{question}`` the user question.
"""

QA_SUMMARIZE = (
    "Use the following portion of a long document to see if any of the text is "
    "relevant to answer the question. Return any relevant text verbatim.\n"
    "{content}\n"
    "Question: {question}\n"
    "Relevant text, if any:"
)

QA_COMBINE = (
    "Given the following extracted parts of a long document and a question, create a "
    "final answer with references (\"SOURCES\"). If you don't know the answer, just say "
    "that you don't know. Don't try to make up an answer. ALWAYS return a \"SOURCES\" "
    "part in your answer, formatted as \"Sources: <source>, <source>\".\n\n"
    "{content}\n"
    "FINAL ANSWER:"
)
