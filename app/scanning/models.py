from dataclasses import dataclass


@dataclass(frozen=True)
class AntivirusResult:
    """Verdict of an antivirus engine for one blob."""

    infected: bool = False
    threat_names: tuple[str, ...] = ()


@dataclass(frozen=True)
class StructuralFlags:
    """Findings of a structural content inspector for one blob."""

    corrupted: bool = False
    encrypted: bool = False
    embedded_script: bool = False
    embedded_attachment: bool = False
    auto_execution: bool = False
    external_links: bool = False
    interactive_form: bool = False


@dataclass(frozen=True)
class ThreatReport:
    """Merged view of every scanner's findings.

    ``external_links`` is advisory only; every other flag blocks the upload.
    """

    infected: bool = False
    embedded_script: bool = False
    embedded_attachment: bool = False
    auto_execution: bool = False
    external_links: bool = False
    interactive_form: bool = False
    encrypted: bool = False
    corrupted: bool = False
    threat_names: tuple[str, ...] = ()

    _THREAT_KINDS = (
        ("infected", "malware"),
        ("embedded_script", "embedded_script"),
        ("embedded_attachment", "embedded_attachment"),
        ("auto_execution", "auto_execution"),
        ("interactive_form", "interactive_form"),
    )

    @classmethod
    def from_antivirus(cls, result: AntivirusResult) -> "ThreatReport":
        return cls(infected=result.infected, threat_names=result.threat_names)

    @classmethod
    def from_structure(cls, flags: StructuralFlags) -> "ThreatReport":
        return cls(
            embedded_script=flags.embedded_script,
            embedded_attachment=flags.embedded_attachment,
            auto_execution=flags.auto_execution,
            external_links=flags.external_links,
            interactive_form=flags.interactive_form,
            encrypted=flags.encrypted,
            corrupted=flags.corrupted,
        )

    def merge(self, other: "ThreatReport") -> "ThreatReport":
        return ThreatReport(
            infected=self.infected or other.infected,
            embedded_script=self.embedded_script or other.embedded_script,
            embedded_attachment=self.embedded_attachment or other.embedded_attachment,
            auto_execution=self.auto_execution or other.auto_execution,
            external_links=self.external_links or other.external_links,
            interactive_form=self.interactive_form or other.interactive_form,
            encrypted=self.encrypted or other.encrypted,
            corrupted=self.corrupted or other.corrupted,
            threat_names=tuple(dict.fromkeys(self.threat_names + other.threat_names)),
        )

    def threat_kinds(self) -> list[str]:
        """Names of the security threats present, in fixed order."""
        return [kind for attr, kind in self._THREAT_KINDS if getattr(self, attr)]

    @property
    def is_clean(self) -> bool:
        return not (self.threat_kinds() or self.encrypted or self.corrupted)


@dataclass(frozen=True)
class ScanUnavailable:
    """A backing scanner could not answer; the blob is not known to be clean."""

    collaborator: str
    message: str


ScanOutcome = ThreatReport | ScanUnavailable
