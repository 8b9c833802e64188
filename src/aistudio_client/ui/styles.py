"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
Uses Textual CSS features: nesting, pseudo-classes, variables.

Layout:
- Session form across the top
- Chat history on the left, image and log panels on the right
- Status line and input bar across the bottom
"""

APP_CSS = """
/* ============================================
   Main Screen Layout - 2x3 Grid
   ============================================ */
Screen {
    layout: grid;
    grid-size: 2 3;
    grid-columns: 3fr 2fr;
    grid-rows: auto 1fr auto;
    background: $background;
}

/* ============================================
   Session Form
   ============================================ */
SessionBar {
    column-span: 2;
    height: auto;
    padding: 0 1;
    background: $panel;
    border-bottom: solid $border;
}

#api-key-input {
    width: 1fr;
}

#system-prompt-input {
    width: 2fr;
}

#init-btn {
    width: 14;
    margin: 0 0 0 1;
}

/* ============================================
   Chat History Panel
   ============================================ */
#chat-history {
    height: 100%;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus-within {
        border: round $primary;
    }

    &.-maximized {
        column-span: 2;
    }
}

/* ============================================
   Right Panel - Image + Log
   ============================================ */
#right-panel {
    height: 100%;
    background: transparent;
    padding: 0;
}

#image-panel {
    height: 1fr;
    min-height: 10;
    background: $panel;
    border: round $accent 60%;
    border-title-color: $accent;
    border-title-style: bold;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
}

#generated-image {
    width: auto;
    height: auto;
}

#debug-panel {
    height: 1fr;
    min-height: 6;
    background: $panel;
    border: round $warning 60%;
    border-title-color: $warning;
    border-title-style: bold;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;
}

/* ============================================
   Bottom Bar - Status + Input
   ============================================ */
#bottom-bar {
    column-span: 2;
    height: auto;
    padding: 0 1;
    background: $panel;
    border-top: solid $border;
}

#status-line {
    height: 1;
    padding: 0 1;
    color: $text-muted;

    &.-error {
        color: $error;
        text-style: bold;
    }
}

ChatInputBar {
    height: 5;
    border: round $primary 60%;
    background: $panel;

    &:focus-within {
        border: round $primary;
    }

    Button {
        width: 10;
        height: 100%;
        margin: 0 0 0 1;
    }
}

#chat-input {
    width: 1fr;
    height: 100%;
    border: none;
    padding: 0 1;
    background: transparent;
}

/* ============================================
   Chat Messages
   ============================================ */
.chat-message {
    width: 100%;
    height: auto;
    margin: 0 0 1 0;
    padding: 0 1;
}

.user-message {
    border-left: tall $success;
    background: $success 8%;

    & .message-header {
        color: $success;
        text-style: bold;
    }
}

.assistant-message {
    border-left: tall $secondary;
    background: $secondary 8%;

    & .message-header {
        color: $secondary;
        text-style: bold;
    }
}

.system-message {
    border-left: tall $border;
    background: $surface;

    & .message-header {
        color: $text-muted;
        text-style: italic;
    }
}

.message-header {
    height: auto;
}

.message-content {
    height: auto;
    margin: 0;
}

Markdown {
    margin: 0;
    padding: 0;
}
"""
