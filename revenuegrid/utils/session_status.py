import enum


class SessionStatus(enum.Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    LOAD_FAILED = "load_failed"

    IDLE = "idle"
    PENDING_WRITE = "pending_write"
    WRITING = "writing"
    SETTLING = "settling"
    RECONCILING = "reconciling"

    CLOSED = "closed"

    def get_status_label(self):
        match self.name:
            case "UNINITIALIZED":
                return "Not loaded"
            case "LOADING":
                return "Loading"
            case "LOAD_FAILED":
                return "Loading failed"
            case "IDLE":
                return "Saved"
            case "PENDING_WRITE":
                return "Unsaved changes"
            case "WRITING":
                return "Saving"
            case "SETTLING":
                return "Saved"
            case "RECONCILING":
                return "Syncing"
            case "CLOSED":
                return "Closed"

    def is_ready(self) -> bool:
        # Whether the grid can be edited
        return self not in (
            SessionStatus.UNINITIALIZED,
            SessionStatus.LOADING,
            SessionStatus.CLOSED,
        )
