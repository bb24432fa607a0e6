from __future__ import annotations

import textwrap

from meekstv.messages import format_scaled, join_candidates, join_list, pluralise
from meekstv.result import ElectionResult, ElectionRound
from meekstv.types import Candidate


def ceil_div(a: int, b: int) -> int:
    return -(-a // b)


class TextReport:
    """
    Fixed width report of a count, in the layout used by OpaVote and OpenSTV,
    so results can be compared with those tools line by line.
    """

    max_width = 79

    def __init__(self, result: ElectionResult) -> None:
        self.result = result
        self.out: list[str] = []
        self.columns: tuple[Candidate, ...] = tuple(
            c for c in range(len(result.names)) if c not in result.withdrawn
        )

    def generate(self) -> str:
        result = self.result
        precision = result.precision
        p = 10**precision

        largest = max(
            max(r.surplus, r.threshold, r.exhausted, *r.counts) for r in result.rounds
        )
        # Integer digits, decimal point and decimals
        max_col_width = len(str(largest // p)) + precision + 1

        n_col = len(self.columns) + 3
        # At least one value per line, even when it is wider than the line
        max_n_sub_col = max((self.max_width - 2) // (max_col_width + 1), 1)
        n_row = ceil_div(n_col, max_n_sub_col)
        n_sub_col = ceil_div(n_col, n_row)
        col_width = (self.max_width - 2) // n_sub_col - 1
        width = 2 + n_sub_col * (col_width + 1)

        labels = [result.names[c] for c in self.columns] + [
            "Exhausted",
            "Surplus",
            "Threshold",
        ]
        longest = max(len(label) for label in labels)
        max_name_len = longest + col_width - (longest % col_width)
        header = [label.ljust(max_name_len) for label in labels]
        n_sub_row = ceil_div(max_name_len, col_width)

        self.out = [self.generate_header()]
        for r in range(n_row):
            for sr in range(n_sub_row):
                line = " R" if r == 0 and sr == 0 else "  "
                begin = sr * col_width
                for h in range(r * n_sub_col, min((r + 1) * n_sub_col, len(header))):
                    line += f"|{header[h][begin:begin + col_width]}"
                self.out.append(f"{line}\n")
            if r < n_row - 1:
                dashes = "-" * col_width
                self.out.append(f"  |{(dashes + '+') * (n_sub_col - 1)}{dashes}\n")

        for election_round in result.rounds:
            self.generate_round(election_round, width, n_sub_col, col_width)

        self.out.append("\n")
        if result.incomplete_reason:
            self.out.append(f"Count incomplete. {result.incomplete_reason}\n")
        self.out.append(self.winner_text())
        return "".join(self.out)

    def generate_header(self) -> str:
        result = self.result
        seats = result.seats
        return (
            f"Ballot file contains {len(result.names)} candidates and "
            f"{result.ballot_count + result.empty_ballot_count} ballots.\n"
            f"{self.withdrawn_text()}\n"
            f"Ballot file contains {result.ballot_count} non-empty ballots.\n"
            "\n"
            f"Counting votes for {result.title} using Meek STV.\n"
            f"{len(self.columns)} candidates running for {seats} {pluralise('seat', seats)}.\n\n"
        )

    def withdrawn_text(self) -> str:
        withdrawn = self.result.withdrawn
        if not withdrawn:
            return "No candidates have withdrawn."
        return (
            f"Removed withdrawn {pluralise('candidate', len(withdrawn))} "
            f"{join_candidates(withdrawn, self.result.names)} from the ballots."
        )

    def round_values(self, election_round: ElectionRound) -> list[str]:
        """Formatted counts, blank for candidates already excluded and without votes"""
        precision = self.result.precision
        values = []
        for candidate in self.columns:
            votes = election_round.counts[candidate]
            lost_at = self.result.lost_at(candidate)
            if lost_at is not None and lost_at <= election_round.round and not votes:
                values.append("")
            else:
                values.append(format_scaled(votes, precision))
        values.extend(
            format_scaled(v, precision)
            for v in (election_round.exhausted, election_round.surplus, election_round.threshold)
        )
        return values

    def generate_round(
        self, election_round: ElectionRound, width: int, n_sub_col: int, col_width: int
    ) -> None:
        self.out.append("=" * width + "\n")
        line = str(election_round.round + 1).rjust(2)
        for index, value in enumerate(self.round_values(election_round)):
            if index and index % n_sub_col == 0:
                line += "\n  "
            line += f"|{value.rjust(col_width)}"
        self.out.append(f"{line}\n")

        self.out.append(f"  |{'-' * (width - 3)}\n")
        wrapped = textwrap.wrap(election_round.message.strip(), width=width - 4)
        self.out.append("\n".join(f"  | {text}" for text in wrapped) + "\n")

    def winner_text(self) -> str:
        winners = sorted(self.result)
        if not winners:
            return "No winners."
        names = join_list(self.result.names[c] for c in winners)
        if len(winners) == 1:
            return f"Winner is {names}."
        return f"Winners are {names}."
