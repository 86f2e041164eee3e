"""
Word lists for lexical sentiment analysis.
"""

POSITIVE_WORDS = frozenset([
    'happy', 'joy', 'great', 'wonderful', 'amazing', 'love', 'grateful', 'excited',
    'peaceful', 'calm', 'content', 'fulfilled', 'motivated', 'energetic', 'hopeful',
    'confident', 'proud', 'accomplished', 'relaxed', 'blessed', 'appreciate',
    'enjoy', 'beautiful', 'good', 'better', 'best', 'success', 'progress', 'growth',
])

NEGATIVE_WORDS = frozenset([
    'sad', 'depressed', 'anxious', 'stressed', 'worried', 'frustrated', 'angry',
    'tired', 'exhausted', 'overwhelmed', 'lonely', 'hopeless', 'nervous', 'scared',
    'disappointed', 'fail', 'failed', 'mistake', 'wrong', 'bad', 'terrible',
    'awful', 'hate', 'difficult', 'hard', 'struggle', 'pain', 'hurt', 'upset',
])

# Emotion -> trigger substrings. Order is the tie-break order for equal scores.
EMOTION_KEYWORDS = {
    'happy': ('happy', 'joy', 'excited', 'cheerful', 'delighted', 'pleased'),
    'calm': ('calm', 'peaceful', 'relaxed', 'serene', 'tranquil', 'centered'),
    'anxious': ('anxious', 'nervous', 'worried', 'uneasy', 'tense', 'apprehensive'),
    'stressed': ('stressed', 'overwhelmed', 'pressure', 'burden', 'tension', 'strain'),
    'sad': ('sad', 'down', 'blue', 'melancholy', 'unhappy', 'disappointed'),
    'grateful': ('grateful', 'thankful', 'appreciate', 'blessed', 'fortunate', 'appreciative'),
    'motivated': ('motivated', 'inspired', 'driven', 'energized', 'focused', 'determined'),
    'tired': ('tired', 'exhausted', 'fatigue', 'weary', 'drained', 'sleepy'),
    'frustrated': ('frustrated', 'annoyed', 'irritated', 'aggravated', 'impatient', 'stuck'),
}

NEGATIVE_STATE_SUGGESTIONS = (
    'Consider talking to a friend or mental health professional',
    'Try a gentle meditation to process these emotions',
    'Be gentle with yourself - difficult emotions are temporary',
)

EMOTION_SUGGESTIONS = {
    'anxious': ('Practice deep breathing exercises', 'Ground yourself in the present moment'),
    'stressed': ('Take a short break from your current task', 'List what you can control vs what you cannot'),
    'tired': ('Consider a short rest or nap', 'Ensure you stayed hydrated today'),
    'sad': ('Allow yourself to feel these emotions', 'Reach out to someone you trust'),
}

POSITIVE_STATE_SUGGESTIONS = (
    'Take a moment to appreciate this positive state',
    'Consider journaling about what contributed to these feelings',
)
