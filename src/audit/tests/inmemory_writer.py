from src.audit.writer import AuditAction, AuditEntry, AuditWriter


class InMemoryAuditWriter(AuditWriter):
    def __init__(self, fail: bool = False):
        self.entries: list[AuditEntry] = []
        self.fail = fail

    async def write(self, entry: AuditEntry) -> None:
        if self.fail:
            raise RuntimeError("audit sink unavailable")
        self.entries.append(entry)

    def actions(self) -> list[AuditAction]:
        return [entry.action for entry in self.entries]

    def last(self, action: AuditAction) -> AuditEntry:
        return [entry for entry in self.entries if entry.action == action][-1]
