"""QVote command line tools."""
