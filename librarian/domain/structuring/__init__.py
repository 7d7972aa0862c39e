# Knowledge structuring sessions: plan, compose and write section files
