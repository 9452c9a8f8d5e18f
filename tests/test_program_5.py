from dotmis.interpreter import Interpreter


def test_program_5_load_skips_malformed_lines(capsys):
    with open('examples/program_5.pbcb', 'r', encoding='utf-8') as f:
        source = f.read()
    interp = Interpreter()
    interp.load_source(source)
    assert [line.number for line in interp.program] == [10, 20, 40]
    interp.run()
    out = capsys.readouterr().out
    assert out == 'hi there\n(null)\n'
