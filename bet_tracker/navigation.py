# bet_tracker/navigation.py
MENU = [
    {
        "label": "Dashboard",
        "icon": "bi bi-speedometer2",
        "endpoint": "main.index",
    },
    {
        "label": "History",
        "icon": "bi bi-journal-text",
        "endpoint": "main.history_page",
    },
    {
        "label": "Statistics",
        "icon": "bi bi-bar-chart-line",
        "endpoint": "main.stats_page",
    },
    {
        "label": "Settings",
        "icon": "bi bi-gear",
        "endpoint": "settings.settings_page",
    },
]
