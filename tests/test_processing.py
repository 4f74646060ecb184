"""Tests for subroutine and main-flow pseudocode synthesis"""

from rpgdoc.config import get_config
from rpgdoc.static_analysis.processing_synthesizer import (
    GENERIC_PSEUDOCODE, ProcessingSynthesizer,
)
from rpgdoc.static_analysis.source_lines import split_lines


def _steps(source, config=None, entry_parameters=None):
    return ProcessingSynthesizer(config).synthesize(split_lines(source), entry_parameters)


def _subroutine(name, body_lines):
    return (f"     C     {name:<14}BEGSR\n" + "".join(body_lines) +
            "     C                   ENDSR\n")


class TestFallbackLadder:
    """Subroutines, then main read loop, then generic"""

    def test_generic_step_when_nothing_found(self, calculation_only_program):
        """Exactly one generic step when there are no subroutines or reads.

        User Outcome at Risk: Detailed processing section is empty.
        """
        steps = _steps(calculation_only_program)

        assert len(steps) == 1
        assert steps[0].process_name == 'Main Processing'
        assert steps[0].pseudocode == GENERIC_PSEUDOCODE

    def test_one_step_per_subroutine(self, maintenance_program):
        steps = _steps(maintenance_program)

        assert [s.process_name for s in steps] == ['ADDREC', 'CHGREC', 'DLTREC']
        assert [s.step_number for s in steps] == [1, 2, 3]
        assert steps[0].description == 'Subroutine: ADDREC'

    def test_main_read_loop_alongside_subroutines(self, read_loop_program):
        steps = _steps(read_loop_program, entry_parameters=['RUNDATE'])

        assert [s.process_name for s in steps] == ['Main Read Loop', 'CALCTOT']
        assert steps[0].parameters == ['RUNDATE']
        assert steps[0].pseudocode == [
            "FUNCTION main_read_loop()",
            "  READ ORDERS record",
            "  WHILE NOT end_of_file",
            "    PROCESS record",
            "    READ next ORDERS record",
            "  END WHILE",
            "END FUNCTION",
        ]

    def test_read_inside_subroutine_is_not_main_flow(self):
        source = _subroutine("LOADSR", ["     C                   READ      ORDERS\n"])

        steps = _steps(source)

        assert [s.process_name for s in steps] == ['LOADSR']

    def test_begsr_closes_open_subroutine(self):
        source = ("     C     FIRST         BEGSR\n"
                  "     C                   EXSR      HELPER\n"
                  "     C     SECOND        BEGSR\n"
                  "     C                   WRITE     OUTREC\n")

        steps = _steps(source)

        assert [s.process_name for s in steps] == ['FIRST', 'SECOND']
        assert steps[0].pseudocode == ["FUNCTION first()", "  PERFORM HELPER", "END FUNCTION"]
        assert steps[1].pseudocode == ["FUNCTION second()", "  WRITE OUTREC record",
                                       "END FUNCTION"]


class TestPseudocode:
    """Statement rewriting"""

    def test_nested_blocks_and_message_display(self, maintenance_program):
        steps = {s.process_name: s for s in _steps(maintenance_program)}

        assert steps['ADDREC'].pseudocode == [
            "FUNCTION addrec()",
            "  IF CUSTNAME = '' THEN",
            "    SET *IN31 = *ON",
            "    DISPLAY message USR0001",
            "  END IF",
            "  WRITE CUSTREC record",
            "END FUNCTION",
        ]
        assert steps['CHGREC'].pseudocode == [
            "FUNCTION chgrec()",
            "  READ CUSTMAST record by key CUSTKEY",
            "  IF %FOUND(CUSTMAST) THEN",
            "    SET CUSTBAL = CUSTBAL + PAYAMT",
            "    UPDATE CUSTREC record",
            "  END IF",
            "END FUNCTION",
        ]

    def test_select_branches(self):
        source = _subroutine("DISPATCH", [
            "     C                   SELECT\n",
            "     C                   WHEN      OPTION = '1'\n",
            "     C                   EXSR      ADDREC\n",
            "     C                   OTHER\n",
            "     C                   EXSR      ERRSR\n",
            "     C                   ENDSL\n",
        ])

        assert _steps(source)[0].pseudocode == [
            "FUNCTION dispatch()",
            "  SELECT",
            "  WHEN OPTION = '1'",
            "    PERFORM ADDREC",
            "  OTHERWISE",
            "    PERFORM ERRSR",
            "  END SELECT",
            "END FUNCTION",
        ]

    def test_unrecognized_statements_are_dropped(self):
        source = _subroutine("INIT", [
            "     C                   TIME                    NOW\n",
            "     C                   RETURN\n",
        ])

        assert _steps(source)[0].pseudocode == ["FUNCTION init()", "  RETURN", "END FUNCTION"]


class TestTruncation:
    """Hard cap on pseudocode body lines"""

    def test_body_capped_and_closed(self):
        """Long subroutines are cut at the cap and still end with END FUNCTION.

        User Outcome at Risk: Report explodes or loses its terminal marker.
        """
        body = [f"     C                   EVAL      F{i} = {i}\n" for i in range(70)]

        step = _steps(_subroutine("BIGSR", body))[0]

        assert step.truncated
        assert len(step.pseudocode) == 62
        assert step.pseudocode[-1] == "END FUNCTION"
        assert step.pseudocode[-2] == "  SET F59 = 59"

    def test_exactly_at_cap_is_not_truncated(self):
        body = [f"     C                   EVAL      F{i} = {i}\n" for i in range(60)]

        step = _steps(_subroutine("FULLSR", body))[0]

        assert not step.truncated
        assert len(step.pseudocode) == 62

    def test_cap_is_configurable(self):
        config = get_config()
        config["pseudocode_max_lines"] = 3
        body = [f"     C                   EVAL      F{i} = {i}\n" for i in range(5)]

        step = _steps(_subroutine("SMALLSR", body), config=config)[0]

        assert step.truncated
        assert step.pseudocode == ["FUNCTION smallsr()", "  SET F0 = 0", "  SET F1 = 1",
                                   "  SET F2 = 2", "END FUNCTION"]
