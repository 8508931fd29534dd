"""
speakscore

Phrase-level scoring for speech-coaching sessions:
- Tag transcript text as strong / weak / filler / normal via greedy longest-match lookup
- Score the user's side of a session on a 0..100 scale (ratio-normalized)
- Derive improvement hints and a per-word filler breakdown
- SRT files can be fed in batch; live recognizer text goes through SessionTranscript
"""
