CONTRACT_VERSION = "1.0.0"

COMMAND_INTENTS = (
    "start_session",
    "move",
    "enter_current_tile",
    "choose_fight",
    "choose_bribe",
    "cancel_input",
    "fight",
    "flee",
    "bribe",
    "use_item",
)

QUERY_INTENTS = (
    "get_session_view",
    "calculate_score",
    "build_score_record",
)

LEADERBOARD_INTENTS = (
    "submit_score",
    "top_scores",
    "top_entry_views",
    "user_best",
    "check_if_top_score",
)

CONTRACT_DTO_TYPES = (
    "ActionResult",
    "SessionView",
    "PlayerView",
    "TileView",
    "EncounterView",
    "LogEntryView",
    "ScoreView",
    "LeaderboardEntryView",
    "SubmitScoreResult",
    "LeaderboardQueryResult",
    "UserBestResult",
    "TopScoreCheck",
)
