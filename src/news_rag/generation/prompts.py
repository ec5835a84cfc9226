"""Prompt and fallback templates for grounded news answers."""

PROBE_PROMPT = 'Hello, respond with "OK"'
PROBE_TOKEN = "OK"

NO_INFORMATION_DISCLAIMER = (
    "I don't have specific information about this in the recent news, but generally..."
)

RAG_PROMPT = """You are a helpful news assistant. Use the provided news articles to answer the user's question.

RECENT NEWS ARTICLES:
{articles}

{history_block}USER QUESTION: {query}

INSTRUCTIONS:
1. Answer based on the news articles provided above
2. If the articles don't contain relevant information, say "{disclaimer}" and provide helpful information
3. Be concise and factual
4. Reference specific articles when possible (e.g., "According to Source 1...")
5. Keep your response under {word_limit} words

Please provide a helpful answer:"""

NO_ARTICLES = "No relevant articles were found."

ARTICLE_ENTRY = "Source {index}: {title}\nContent: {content}"

HISTORY_BLOCK = "RECENT CONVERSATION:\n{history}\n\n"

FALLBACK_RESPONSE = """I found {count} relevant news articles for your question about "{query}":

{titles}

Note: {note}

In a fully working system, I would provide a detailed summary based on the content of these articles."""

FALLBACK_NO_ARTICLES = "(no matching articles were found in the recent news)"

# Explanatory clauses, one per failure cause
SAFETY_NOTE = "The response was blocked by safety filters."
QUOTA_NOTE = "The AI service quota has been exceeded. Please try again later."
SERVICE_NOTE = "The AI service encountered an error: {detail}"
UNAVAILABLE_NOTE = "The AI service is currently unavailable."
EMPTY_NOTE = "Received an empty response from the AI service."
INCOMPLETE_NOTE = "The AI service stopped before completing a response ({reason})."
