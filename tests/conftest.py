"""Shared RPG source fixtures"""

import pytest

from rpgdoc.static_analysis.source_lines import split_lines


UPDATE_PROGRAM = """\
     FMASTFILE  IF   E           K DISK
     FTRANFILE  UF A E           K DISK
     D CUSTNO          S              7  0
     C     *ENTRY        PLIST
     C                   PARM                    CUSTNO
     C     CUSTNO        CHAIN     MASTFILE                           90
     C                   IF        NOT *IN90
     C                   EVAL      CUSTNAME = MNAME
     C                   EVAL      AMOUNT = MAMT + 100
     C                   UPDATE    TRANREC
     C                   ENDIF
     C                   SETON                                        LR
"""

MAINTENANCE_PROGRAM = """\
     H DFTNAME(CUSTMNT)
      * Program Name: CUSTMNT
     FCUSTDSP   CF   E             WORKSTN
     FCUSTMAST  UF A E           K DISK
     FHELPTXT   IF   E           K DISK
     C     CUSTKEY       KLIST
     C                   KFLD                    CUSTNO
     C                   KFLD                    CMPNO
     C                   EXFMT     CUSTSCR
     C                   SELECT
     C                   WHEN      OPTION = '1'
     C                   EXSR      ADDREC
     C                   WHEN      OPTION = '2'
     C                   EXSR      CHGREC
     C                   WHEN      OPTION = '4'
     C                   EXSR      DLTREC
     C                   WHEN      OPTION = '9'
     C                   CALL      'CUSTHIST'
     C                   PARM                    CUSTNO
     C                   PARM                    CMPNO
     C                   ENDSL
     C                   CALL      'QCMDEXC'
     C                   PARM                    CMDSTR
     C                   EXFMT     HELPSCR
     C                   SETON                                        LR
     C     ADDREC        BEGSR
     C                   IF        CUSTNAME = ''
     C                   EVAL      *IN31 = *ON
     C                   EVAL      MSGID = 'USR0001'
     C                   ENDIF
     C                   WRITE     CUSTREC
     C                   ENDSR
     C     CHGREC        BEGSR
     C     CUSTKEY       CHAIN     CUSTMAST
     C                   IF        %FOUND(CUSTMAST)
     C                   EVAL      CUSTBAL = CUSTBAL + PAYAMT
     C                   UPDATE    CUSTREC
     C                   ENDIF
     C                   ENDSR
     C     DLTREC        BEGSR
     C     CUSTKEY       DELETE    CUSTMAST
     C                   ENDSR
"""

READ_LOOP_PROGRAM = """\
     FORDERS    IF   E           K DISK
     FORDRPT    O    E             PRINTER
     C                   READ      ORDERS                                 99
     C                   DOW       NOT *IN99
     C                   EXSR      CALCTOT
     C                   READ      ORDERS                                 99
     C                   ENDDO
     C                   SETON                                        LR
     C     CALCTOT       BEGSR
     C                   ADD       ORDAMT        TOTAMT
     C                   WRITE     DETAIL
     C                   ENDSR
"""

CALCULATION_ONLY_PROGRAM = """\
     D TOTAL           S              9  2
     C                   EVAL      TOTAL = 0
     C                   SETON                                        LR
"""

MESSAGE_TABLE = """\
USR0001  10 / Customer name is required
USR0002  20 / Amount must be positive
"""


@pytest.fixture
def update_program():
    return UPDATE_PROGRAM


@pytest.fixture
def maintenance_program():
    return MAINTENANCE_PROGRAM


@pytest.fixture
def read_loop_program():
    return READ_LOOP_PROGRAM


@pytest.fixture
def calculation_only_program():
    return CALCULATION_ONLY_PROGRAM


@pytest.fixture
def message_table():
    return MESSAGE_TABLE


@pytest.fixture
def maintenance_lines():
    return split_lines(MAINTENANCE_PROGRAM)
